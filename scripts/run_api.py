"""Start the pricing API under uvicorn, host and port taken from Settings."""
import argparse
import os
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from storefront_pricing.config.settings import get_settings  # noqa: E402


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the storefront pricing API")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT / "src"), env.get("PYTHONPATH")]))

    cmd = [
        sys.executable, "-m", "uvicorn", "storefront_pricing.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
        "--log-level", settings.log_level.lower(),
    ]
    if args.reload:
        cmd.append("--reload")

    print(f"Serving storefront pricing on http://{args.host}:{args.port} (data: {settings.data_dir})")
    try:
        subprocess.run(cmd, env=env, cwd=PROJECT_ROOT)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
