"""
실행 허가(admission) 판정

쿼리 문자열에서 라벨 / 관계 타입 토큰을 정규식으로 추출해 스키마에 없는 것을
참조하는 잡을 실행 전에 건너뛴다. Cypher 파서가 아니므로 문자열 리터럴 안의
토큰은 오탐(불필요한 skip)이 될 수 있고, 줄바꿈으로 나뉜 패턴은 놓칠 수 있다.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Sequence

from planner.presence import SchemaPresence
from worker.model.job import Job

logger = logging.getLogger(__name__)

LABEL = "label"
RELATIONSHIP_TYPE = "relationship type"

# (u:User), (:Group), (n:A:B) / [:MemberOf
_TOKEN_PATTERN = re.compile(
    r"\[:(?P<rel>[A-Za-z0-9_]+)"
    r"|\(\s*[A-Za-z0-9_]*\s*(?P<labels>(?::[A-Za-z0-9_]+)+)"
)


@dataclass(frozen=True)
class AdmissionDecision:
    """잡 단위 판정 결과"""
    runnable: bool
    reason: str = ""


@dataclass(frozen=True)
class AdmissionPlan:
    """전체 판정 결과"""
    runnable: tuple[Job, ...] = ()
    skipped: Mapping[int, str] = field(default_factory=dict)  # job index -> reason


def scan_tokens(query_text: str) -> Iterator[tuple[str, str]]:
    """
    (토큰 종류, 이름)을 원문 등장 순서대로 반환

    같은 종류/이름(대소문자 무시)은 한 번만 반환한다.
    """
    seen: set[tuple[str, str]] = set()
    for match in _TOKEN_PATTERN.finditer(query_text):
        if match.group("rel"):
            names = [(RELATIONSHIP_TYPE, match.group("rel"))]
        else:
            names = [(LABEL, name) for name in match.group("labels").split(":") if name]

        for kind, name in names:
            key = (kind, name.lower())
            if key in seen:
                continue
            seen.add(key)
            yield kind, name


def plan(job: Job, presence: SchemaPresence) -> AdmissionDecision:
    """잡 하나의 실행 가능 여부 판정 (첫 번째 누락 토큰에서 중단)"""
    for kind, name in scan_tokens(job.query_text):
        if kind == LABEL:
            known = presence.has_label(name)
        else:
            known = presence.has_relationship_type(name)
        if not known:
            return AdmissionDecision(runnable=False, reason=f"missing {kind}: {name}")
    return AdmissionDecision(runnable=True)


def plan_all(jobs: Sequence[Job], presence: SchemaPresence | None) -> AdmissionPlan:
    """
    전체 잡 판정

    Args:
        jobs: 원래 순서의 잡 목록
        presence: None이면 판정 없이 모두 실행 가능

    Returns:
        AdmissionPlan: 실행할 잡 (원래 순서 유지) + skip 사유
    """
    if presence is None:
        return AdmissionPlan(runnable=tuple(jobs))

    runnable: list[Job] = []
    skipped: dict[int, str] = {}
    for job in jobs:
        decision = plan(job, presence)
        if decision.runnable:
            runnable.append(job)
        else:
            skipped[job.index] = decision.reason
            logger.info(f"Skipping {job.display_name} [{job.identifier}]: {decision.reason}")

    logger.debug(f"Admission: {len(runnable)} runnable, {len(skipped)} skipped")
    return AdmissionPlan(runnable=tuple(runnable), skipped=skipped)
