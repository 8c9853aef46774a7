"""Planner 모듈 - 스키마 기반 실행 허가"""

from planner.presence import SchemaPresence
from planner.admission import (
    AdmissionDecision,
    AdmissionPlan,
    plan,
    plan_all,
    scan_tokens,
)

__all__ = [
    "SchemaPresence",
    "AdmissionDecision",
    "AdmissionPlan",
    "plan",
    "plan_all",
    "scan_tokens",
]
