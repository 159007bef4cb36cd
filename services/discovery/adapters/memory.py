from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ..store import STORE_ROW_CAP, Predicate, capped_bounds


class MemoryStore:
    """In-process store over plain row dicts, with the same row cap as the real one."""

    name = "memory"

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]] | None = None, row_cap: int = STORE_ROW_CAP) -> None:
        self._tables: Dict[str, List[Dict[str, Any]]] = {k: list(v) for k, v in (tables or {}).items()}
        self.row_cap = row_cap
        self.calls: list[tuple] = []

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self._tables.setdefault(table, [])

    def insert(self, table: str, rows: Sequence[Dict[str, Any]]) -> None:
        self.rows(table).extend(dict(r) for r in rows)

    def _where(self, table: str, predicates: Sequence[Predicate]) -> List[Dict[str, Any]]:
        return [r for r in self.rows(table) if all(p.matches(r) for p in predicates)]

    def _ordered(self, rows: List[Dict[str, Any]], order_by: str, descending: bool) -> List[Dict[str, Any]]:
        present = [r for r in rows if r.get(order_by) is not None]
        missing = [r for r in rows if r.get(order_by) is None]
        return sorted(present, key=lambda r: r[order_by], reverse=descending) + missing

    def count(self, table: str, predicates: Sequence[Predicate] = ()) -> int:
        self.calls.append(("count", table))
        return len(self._where(table, predicates))

    def range_query(self, table: str, start: int, end: int, order_by: str, descending: bool = False):
        self.calls.append(("range", table, start, end))
        if end < start:
            return []
        lo, hi = capped_bounds(start, end, self.row_cap)
        ordered = self._ordered(self.rows(table), order_by, descending)
        return [dict(r) for r in ordered[lo : hi + 1]]

    def predicate_query(
        self, table: str, predicates: Sequence[Predicate], columns=None, start=None, end=None, order_by=None, descending=False
    ):
        self.calls.append(("predicate", table, tuple(predicates), start, end))
        lo, hi = capped_bounds(start, end, self.row_cap)
        rows = self._where(table, predicates)
        if order_by:
            rows = self._ordered(rows, order_by, descending)
        rows = rows[lo : hi + 1]
        if columns:
            return [{c: r.get(c) for c in columns} for r in rows]
        return [dict(r) for r in rows]
