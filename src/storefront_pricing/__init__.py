"""
Storefront Pricing Package

Order pricing for the storefront: cart, checkout and rental totals.
Resolves totals using Line Items → Coupon Discount → Tax → Total.
"""

__version__ = "1.0.0"
