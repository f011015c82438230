"""Sequential bulk mutation loop.

Each item ends in exactly one of three outcomes: *skip* (already in the
desired state, no call, no delay), *success* (mutation done, then the pacer
sleeps) or *failure* (recorded, batch continues). Items are processed one at
a time in the order the collection yields them.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

_log = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["Pacer", "ItemFailure", "BatchResult", "run_batch"]


class Pacer:
    """Fixed delay inserted after every successful mutation."""

    def __init__(self, interval: float, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self.interval = interval
        self._sleep = sleep

    async def wait(self) -> None:
        if self.interval > 0:
            await self._sleep(self.interval)


@dataclass(frozen=True)
class ItemFailure:
    item_id: int
    name: str
    reason: str

    def render(self, verb: str) -> str:
        return f"Failed to {verb} {self.name}: {self.reason}"


@dataclass
class BatchResult:
    total: int = 0
    success_count: int = 0
    skip_count: int = 0
    error_count: int = 0
    failures: list[ItemFailure] = field(default_factory=list)
    succeeded: list[Any] = field(default_factory=list)

    def error_messages(self, verb: str, limit: int) -> list[str]:
        return [failure.render(verb) for failure in self.failures[:limit]]


async def run_batch(
    items: Iterable[T],
    mutate: Callable[[T], Awaitable[Any]],
    *,
    pacer: Pacer,
    describe: Callable[[T], tuple[int, str]],
    should_skip: Optional[Callable[[T], bool]] = None,
) -> BatchResult:
    """Apply *mutate* to every item and return the aggregated outcome.

    *describe* maps an item to ``(id, display name)`` for failure records.
    Whatever *mutate* returns for a successful item is kept in
    ``BatchResult.succeeded``.
    """

    result = BatchResult()
    for item in items:
        result.total += 1
        try:
            if should_skip is not None and should_skip(item):
                result.skip_count += 1
                continue
            outcome = await mutate(item)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            item_id, name = describe(item)
            result.error_count += 1
            result.failures.append(ItemFailure(item_id=item_id, name=name, reason=str(exc)))
            _log.warning("Mutation failed for %s (%s): %s", name, item_id, exc)
            continue

        result.success_count += 1
        result.succeeded.append(outcome)
        await pacer.wait()

    _log.info(
        "Batch finished: %d total, %d succeeded, %d skipped, %d failed",
        result.total,
        result.success_count,
        result.skip_count,
        result.error_count,
    )
    return result
