"""
Row accumulation with a cap shared by every result set of one script.
"""

from typing import Any

from sqlrunner.engines.sql.values import CellValue, normalize_value

Row = dict[str, CellValue]


class ResultCollector:
    def __init__(self, max_rows: int) -> None:
        if max_rows < 1:
            raise ValueError("max_rows must be >= 1")
        self.max_rows = max_rows
        self._rows: list[Row] = []
        self._truncated = False

    @property
    def remaining(self) -> int:
        return self.max_rows - len(self._rows)

    @property
    def full(self) -> bool:
        return self.remaining <= 0

    @property
    def truncated(self) -> bool:
        return self._truncated

    def accumulate(self, row: dict[str, Any]) -> bool:
        """Append *row* (keys in column order). Returns False once the cap is hit."""
        if self.full:
            return False
        self._rows.append({k: normalize_value(v) for k, v in row.items()})
        return True

    def mark_truncated(self) -> None:
        self._truncated = True

    def finalize(self) -> tuple[list[Row], bool]:
        return list(self._rows), self._truncated
