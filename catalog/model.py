"""
쿼리 카탈로그 모델
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

# 헤더 표기 -> 결과 컬럼 키
_HEADER_ALIASES: dict[str, str] = {
    "hostname": "computer",
    "computer": "computer",
    "operating system": "os",
    "os": "os",
    "user": "user",
    "username": "user",
    "principal": "principal",
    "type": "type",
    "description": "description",
    "group names": "group",
    "group_names": "group",
    "group": "group",
    "groupname": "groupname",
    "password set": "pwdlastset",
    "password_set": "pwdlastset",
    "service acct?": "service_acct",
    "service_acct?": "service_acct",
    "service acct": "service_acct",
    "service_acct": "service_acct",
    "samaccountname": "samaccountname",
    "fqdn": "fqdn",
}


def header_to_key(header: str) -> str:
    """리포트 헤더를 쿼리 결과 컬럼 키로 변환"""
    h = header.strip().lower()
    if h in _HEADER_ALIASES:
        return _HEADER_ALIASES[h]
    return h.replace(" ", "_")


class Category(str, Enum):
    """쿼리 카테고리"""
    AD = "AD"
    ENTRA_ID = "EntraID"
    INFO = "INFO"


class Query(BaseModel):
    """카탈로그 쿼리 (변경 불가)"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    category: str
    sheet_name: str
    headers: tuple[str, ...] = Field(default_factory=tuple)
    description: str = ""
    finding_title: str = ""
    cypher: str

    @computed_field
    @property
    def column_keys(self) -> tuple[str, ...]:
        return tuple(header_to_key(h) for h in self.headers)

    @property
    def is_info(self) -> bool:
        return self.category.lower() == Category.INFO.value.lower()
