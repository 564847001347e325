"""
Analytics package exports.
"""

from srs.analytics.service import build_review_dashboard
from srs.analytics.types import ReviewDashboardData

__all__ = [
    "build_review_dashboard",
    "ReviewDashboardData",
]
