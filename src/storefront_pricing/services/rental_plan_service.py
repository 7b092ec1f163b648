"""
Rental Plan Service - Durations and fee percentages offered for kit rentals.
"""
import uuid
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.models import RentalPlan


class RentalPlanService:
    """
    Reads and writes rental_plans.csv.

    Plans are always returned shortest duration first.
    """

    CSV_COLUMNS = ['plan_id', 'duration_days', 'fee_percentage']

    def __init__(self, rental_plans_path: Path):
        self.rental_plans_path = rental_plans_path

    def _load(self) -> pd.DataFrame:
        if not self.rental_plans_path.exists():
            return pd.DataFrame(columns=self.CSV_COLUMNS)
        df = pd.read_csv(self.rental_plans_path, dtype={'plan_id': str})
        df.columns = [c.strip() for c in df.columns]
        return df.dropna(subset=['plan_id'])

    def list_plans(self) -> list[RentalPlan]:
        """All plans ordered by duration."""
        df = self._load()
        if df.empty:
            return []
        df = df.sort_values('duration_days', kind='stable')
        return [
            RentalPlan(
                plan_id=str(row['plan_id']).strip(),
                duration_days=int(row['duration_days']),
                fee_percentage=float(row['fee_percentage']),
            )
            for _, row in df.iterrows()
        ]

    def get_plan(self, plan_id: str) -> Optional[RentalPlan]:
        """Get a single plan by ID."""
        plan_id = str(plan_id).strip()
        for plan in self.list_plans():
            if plan.plan_id == plan_id:
                return plan
        return None

    def create_plan(self, duration_days: int, fee_percentage: float, plan_id: Optional[str] = None) -> RentalPlan:
        """Create a plan. Duration must be a positive whole number of days, fee 0-100%."""
        if int(duration_days) != duration_days or duration_days <= 0:
            raise ValueError("Duration must be a positive integer.")
        if fee_percentage < 0:
            raise ValueError("Fee cannot be negative.")
        if fee_percentage > 100:
            raise ValueError("Fee cannot exceed 100%.")

        plans = self.list_plans()
        plan_id = plan_id or uuid.uuid4().hex[:12]
        if any(p.plan_id == plan_id for p in plans):
            raise ValueError(f"Rental plan '{plan_id}' already exists")

        plan = RentalPlan(plan_id=plan_id, duration_days=int(duration_days), fee_percentage=float(fee_percentage))
        plans.append(plan)
        self._write_plans(plans)
        return plan

    def delete_plan(self, plan_id: str) -> bool:
        """Delete a plan."""
        plans = self.list_plans()
        remaining = [p for p in plans if p.plan_id != plan_id]
        if len(remaining) == len(plans):
            raise ValueError(f"Rental plan '{plan_id}' not found")
        self._write_plans(remaining)
        return True

    def _write_plans(self, plans: list[RentalPlan]):
        self.rental_plans_path.parent.mkdir(parents=True, exist_ok=True)
        df = pd.DataFrame(
            [[p.plan_id, p.duration_days, p.fee_percentage] for p in plans],
            columns=self.CSV_COLUMNS,
        )
        df.to_csv(self.rental_plans_path, index=False)
