from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Protocol, Sequence

# Hard per-request row cap of the backing store. The bulk loader's batch size
# and the availability resolver's page/chunk sizes are all derived from it.
STORE_ROW_CAP = 1000

CATALOG_TABLE = "cached_movies"
PROVIDERS_TABLE = "cached_providers"

PredicateOp = Literal["eq", "in", "gte"]


class TransientStoreError(RuntimeError):
    """A single store request failed (network, timeout, backend error)."""

    def __init__(self, message: str, *, table: str | None = None, op: str | None = None):
        super().__init__(message)
        self.table = table
        self.op = op


@dataclass(frozen=True)
class Predicate:
    column: str
    op: PredicateOp
    value: Any

    def matches(self, row: dict[str, Any]) -> bool:
        have = row.get(self.column)
        if self.op == "eq":
            return have == self.value
        if self.op == "in":
            return have in self.value
        if self.op == "gte":
            return have is not None and have >= self.value
        raise ValueError(f"unsupported predicate op: {self.op}")


def eq(column: str, value: Any) -> Predicate:
    return Predicate(column, "eq", value)


def in_(column: str, values: Iterable[Any]) -> Predicate:
    return Predicate(column, "in", tuple(values))


def gte(column: str, value: Any) -> Predicate:
    return Predicate(column, "gte", value)


class RemoteStore(Protocol):
    """Query surface of the remote metadata store.

    Ranges are inclusive on both ends and every call returns at most
    ``STORE_ROW_CAP`` rows. ``predicate_query`` orders by ``order_by`` when
    given (NULLs last when descending), else by the primary key. Implementations
    raise ``TransientStoreError`` on any I/O failure.
    """

    def count(self, table: str, predicates: Sequence[Predicate] = ()) -> int: ...

    def range_query(
        self, table: str, start: int, end: int, order_by: str, descending: bool = False
    ) -> list[dict[str, Any]]: ...

    def predicate_query(
        self,
        table: str,
        predicates: Sequence[Predicate],
        columns: Sequence[str] | None = None,
        start: int | None = None,
        end: int | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]: ...


def capped_bounds(start: int | None, end: int | None, row_cap: int = STORE_ROW_CAP) -> tuple[int, int]:
    """Clamp an inclusive ``[start, end]`` window to the store's row cap."""
    lo = max(0, start or 0)
    hi = lo + row_cap - 1 if end is None else end
    return lo, min(hi, lo + row_cap - 1)
