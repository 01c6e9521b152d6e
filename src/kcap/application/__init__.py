"""Application facade exports for stable use-case API."""

from kcap.application.analyze_use_case import execute_namespace_analysis
from kcap.application.recommend_use_case import execute_recommendation
from kcap.application.report_writer import RunResult

__all__ = [
    "execute_namespace_analysis",
    "execute_recommendation",
    "RunResult",
]
