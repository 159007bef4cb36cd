from __future__ import annotations

import logging
import threading
from typing import Any, Sequence

from sqlalchemy import MetaData, Table, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..store import STORE_ROW_CAP, Predicate, TransientStoreError, capped_bounds

logger = logging.getLogger("discovery.store.sql")


class SqlCatalogStore:
    """Store accessor over the cached catalog tables of a SQL database.

    Tables are reflected on first use so the accessor works against any
    schema that carries the ``cached_movies`` / ``cached_providers`` columns.
    The row cap is enforced on every query, as the hosted store does.
    """

    name = "sql"

    def __init__(self, engine: Engine, row_cap: int = STORE_ROW_CAP):
        self.engine = engine
        self.row_cap = row_cap
        self._meta = MetaData()
        self._tables: dict[str, Table] = {}
        self._lock = threading.Lock()

    def _table(self, name: str) -> Table:
        with self._lock:
            tbl = self._tables.get(name)
            if tbl is None:
                tbl = Table(name, self._meta, autoload_with=self.engine)
                self._tables[name] = tbl
            return tbl

    def _clause(self, tbl: Table, p: Predicate):
        col = tbl.c[p.column]
        if p.op == "eq":
            return col == p.value
        if p.op == "in":
            return col.in_(list(p.value))
        if p.op == "gte":
            return col >= p.value
        raise ValueError(f"unsupported predicate op: {p.op}")

    def _run(self, op: str, table: str, build):
        try:
            with self.engine.connect() as conn:
                return build(conn)
        except SQLAlchemyError as e:
            logger.warning("store %s on %s failed: %s", op, table, e)
            raise TransientStoreError(str(e), table=table, op=op) from e

    def count(self, table: str, predicates: Sequence[Predicate] = ()) -> int:
        def build(conn):
            tbl = self._table(table)
            stmt = select(func.count()).select_from(tbl)
            for p in predicates:
                stmt = stmt.where(self._clause(tbl, p))
            return int(conn.execute(stmt).scalar_one())

        return self._run("count", table, build)

    def range_query(self, table: str, start: int, end: int, order_by: str, descending: bool = False):
        if end < start:
            return []
        lo, hi = capped_bounds(start, end, self.row_cap)

        def build(conn):
            tbl = self._table(table)
            col = tbl.c[order_by]
            stmt = select(tbl).order_by(col.desc().nulls_last() if descending else col.asc()).offset(lo).limit(hi - lo + 1)
            return [dict(r._mapping) for r in conn.execute(stmt)]

        return self._run("range", table, build)

    def predicate_query(
        self,
        table: str,
        predicates: Sequence[Predicate],
        columns: Sequence[str] | None = None,
        start: int | None = None,
        end: int | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        lo, hi = capped_bounds(start, end, self.row_cap)

        def build(conn):
            tbl = self._table(table)
            cols = [tbl.c[c] for c in columns] if columns else [tbl]
            stmt = select(*cols)
            for p in predicates:
                stmt = stmt.where(self._clause(tbl, p))
            if order_by:
                col = tbl.c[order_by]
                stmt = stmt.order_by(col.desc().nulls_last() if descending else col.asc())
            pk = list(tbl.primary_key.columns)
            if pk:
                stmt = stmt.order_by(*pk)
            stmt = stmt.offset(lo).limit(hi - lo + 1)
            return [dict(r._mapping) for r in conn.execute(stmt)]

        return self._run("predicate", table, build)
