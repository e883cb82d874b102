"""Unwrap anyio exception groups that hold a single real error.

A failure inside an anyio task group, including one raised by the host task
itself, surfaces as a ``BaseExceptionGroup`` padded with the cancellations of
sibling tasks. Callers of ``connect()`` expect the real error instead.
"""

import contextlib
from collections.abc import AsyncIterator

import anyio
import anyio.abc


def collapse_exception_group(eg: BaseExceptionGroup, cancelled_type: type[BaseException]) -> BaseException:
    """Return the only non-cancellation error of ``eg``, if there is exactly one.

    A group of pure cancellations collapses to its first member. Several real
    errors are returned as a group with the cancellations stripped.
    """
    _, real = eg.split(cancelled_type)
    if real is None:
        return eg.exceptions[0]
    if len(real.exceptions) == 1 and not isinstance(real.exceptions[0], BaseExceptionGroup):
        return real.exceptions[0]
    return real


@contextlib.asynccontextmanager
async def open_task_group() -> AsyncIterator[anyio.abc.TaskGroup]:
    """``anyio.create_task_group()`` that re-raises a lone error unwrapped."""
    try:
        async with anyio.create_task_group() as tg:
            yield tg
    except BaseExceptionGroup as eg:
        collapsed = collapse_exception_group(eg, anyio.get_cancelled_exc_class())
        if collapsed is eg:
            raise
        raise collapsed from eg
