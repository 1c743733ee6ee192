"""Demand-driven pull-stream primitives.

A producer answers each ``request()`` with exactly one response, delivered
through an ``asyncio.Future``. Nothing is produced that was not asked for.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Generic, Protocol, TypeVar, Union

T = TypeVar("T")

# ``True`` for a plain terminate, or the exception that caused it.
EndSignal = Union[bool, BaseException]


class FpathError(RuntimeError):
    """Base class for protocol usage errors."""


class ConcurrentPullError(FpathError):
    def __init__(self, stage: str) -> None:
        super().__init__(f"{stage} already has an outstanding request")
        self.stage = stage


@dataclass(frozen=True, slots=True)
class Item(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class EndOfStream:
    pass


@dataclass(frozen=True, slots=True)
class EndWithError:
    error: BaseException


Response = Union[Item[Any], EndOfStream, EndWithError]


def is_end(response: Response) -> bool:
    return not isinstance(response, Item)


class Producer(Protocol[T]):
    def request(self, end: EndSignal | None = None) -> asyncio.Future[Response]: ...


Through = Callable[[Producer[Any]], Producer[Any]]


def answered(response: Response) -> asyncio.Future[Response]:
    """Return a future already resolved with ``response``."""

    fut: asyncio.Future[Response] = asyncio.get_running_loop().create_future()
    fut.set_result(response)
    return fut


def pipe(source: Producer[Any], *throughs: Through) -> Producer[Any]:
    """Chain ``source`` through each stage, left to right."""

    producer = source
    for through in throughs:
        producer = through(producer)
    return producer


async def iterate(producer: Producer[T]) -> AsyncIterator[T]:
    """Pull items one at a time until the producer ends.

    An end-with-error response is raised as its original exception. Closing
    the iterator early sends a terminate upstream.
    """

    finished = False
    try:
        while True:
            response = await producer.request()
            if isinstance(response, EndWithError):
                finished = True
                raise response.error
            if isinstance(response, EndOfStream):
                finished = True
                return
            yield response.value
    finally:
        if not finished:
            await producer.request(True)


async def collect(producer: Producer[T]) -> list[T]:
    return [value async for value in iterate(producer)]
