"""Scoped transaction port."""

from typing import Awaitable, Callable, Protocol, TypeVar

T = TypeVar("T")


class TransactionScope(Protocol):
    """Runs a unit of work atomically.

    ``run`` commits when ``fn`` returns and rolls back when it raises, so
    a call site cannot forget the rollback path.
    """

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        ...
