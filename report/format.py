"""값 포매터"""

from datetime import datetime, timezone
from typing import Any

_EPOCH_COLUMNS = ("pwdlastset", "lastlogon", "lastlogontimestamp")


class ValueFormatter:
    """리포트 셀 값 변환"""

    @staticmethod
    def one_line(text: str) -> str:
        """줄바꿈/연속 공백을 공백 하나로"""
        return " ".join(text.split())

    def value(self, column_key: str, v: Any) -> str:
        """
        셀 문자열

        pwdlastset / lastlogon* 컬럼의 epoch 초 값은 RFC3339 (UTC)로 변환
        """
        if v is None:
            return ""
        key = column_key.lower()
        if any(name in key for name in _EPOCH_COLUMNS) and isinstance(v, (int, float)) and not isinstance(v, bool):
            try:
                return datetime.fromtimestamp(int(v), tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            except (OverflowError, OSError, ValueError):
                return str(v)
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (list, tuple)):
            return "[" + " ".join(self.value(column_key, item) for item in v) + "]"
        return str(v)
