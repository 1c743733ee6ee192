"""Through-stage that drops entries whose metadata fails a truth test.

Each upstream path is stat'ed before being offered to the test, so the test
sees ``(path, stats)``. A shorthand name such as ``"is-directory"`` stands in
for the common file-type checks.

Called with no test at all, the stage drops *every* entry. This mirrors the
long-standing behaviour of the library; pass a predicate or shorthand to let
anything through.
"""

from __future__ import annotations

import asyncio
import os
import stat as stat_mode
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fpath.protocol.pull import (
    ConcurrentPullError,
    EndOfStream,
    EndSignal,
    EndWithError,
    Item,
    Producer,
    Response,
    is_end,
)
from fpath.runtime_logging import get_runtime_logger

Predicate = Callable[[str, os.stat_result], bool]
StatFetcher = Callable[[str], Awaitable[os.stat_result]]


@dataclass(frozen=True, slots=True)
class Entry:
    path: str
    stats: os.stat_result


SHORTHANDS: dict[str, Callable[[int], bool]] = {
    "is-directory": stat_mode.S_ISDIR,
    "is-file": stat_mode.S_ISREG,
    "is-symbolic-link": stat_mode.S_ISLNK,
    "is-block-device": stat_mode.S_ISBLK,
    "is-character-device": stat_mode.S_ISCHR,
    "is-fifo": stat_mode.S_ISFIFO,
    "is-socket": stat_mode.S_ISSOCK,
}

_ALIASES: dict[str, str] = {
    "isDirectory": "is-directory",
    "isFile": "is-file",
    "isSymbolicLink": "is-symbolic-link",
    "isBlockDevice": "is-block-device",
    "isCharacterDevice": "is-character-device",
    "isFIFO": "is-fifo",
    "isSocket": "is-socket",
}


def reject_all(path: str, stats: os.stat_result) -> bool:  # noqa: ARG001
    return False


def shorthand_predicate(name: str) -> Predicate | None:
    check = SHORTHANDS.get(_ALIASES.get(name, name))
    if check is None:
        return None

    def predicate(path: str, stats: os.stat_result) -> bool:  # noqa: ARG001
        return check(stats.st_mode)

    predicate.__name__ = f"shorthand[{name}]"
    return predicate


def resolve_predicate(test: Predicate | str | None) -> Predicate:
    if test is None:
        return reject_all
    if isinstance(test, str):
        predicate = shorthand_predicate(test)
        if predicate is None:
            get_runtime_logger().warning("filter.shorthand.unknown", shorthand=test)
            return reject_all
        return predicate
    if not callable(test):
        raise TypeError(f"filter test must be callable or a shorthand name, not {type(test).__name__}")
    return test


def stat_fetcher(*, follow_symlinks: bool = True) -> StatFetcher:
    async def fetch(path: str) -> os.stat_result:
        return await asyncio.to_thread(os.stat, path, follow_symlinks=follow_symlinks)

    return fetch


class FilterStage:
    """Forward only upstream paths whose stats satisfy ``predicate``.

    At most one downstream request is served at a time. Rejected items are
    skipped inside that same request, so the consumer sees a single response
    however many entries were dropped to produce it.
    """

    def __init__(
        self,
        upstream: Producer[Any],
        predicate: Predicate,
        *,
        fetch: StatFetcher,
        with_stats: bool = False,
    ) -> None:
        self.upstream = upstream
        self.predicate = predicate
        self.with_stats = with_stats
        self._fetch = fetch
        self._terminal: Response | None = None
        self._aborted = False
        self._inflight: asyncio.Task[None] | None = None

    def request(self, end: EndSignal | None = None) -> asyncio.Future[Response]:
        if end:
            self._aborted = True
            return self.upstream.request(end)

        loop = asyncio.get_running_loop()
        fut: asyncio.Future[Response] = loop.create_future()
        if self._terminal is not None:
            fut.set_result(self._terminal)
            return fut
        if self._inflight is not None and not self._inflight.done():
            raise ConcurrentPullError(type(self).__name__)

        self._inflight = loop.create_task(self._serve(fut))
        return fut

    async def _serve(self, fut: asyncio.Future[Response]) -> None:
        try:
            response = await self._next_match()
        except Exception as exc:
            if not fut.done():
                fut.set_exception(exc)
            return
        if not fut.done():
            fut.set_result(response)

    async def _next_match(self) -> Response:
        while True:
            if self._aborted:
                return EndOfStream()

            response = await self.upstream.request()
            if is_end(response):
                self._terminal = response
                return response
            if self._aborted:
                return EndOfStream()

            path = response.value
            try:
                stats = await self._fetch(path)
            except Exception as exc:
                return await self._fail(path, exc)

            if self._aborted:
                return EndOfStream()
            if self.predicate(path, stats):
                return Item(Entry(path, stats) if self.with_stats else path)
            get_runtime_logger().debug("filter.rejected", path=path)

    async def _fail(self, path: str, exc: Exception) -> Response:
        get_runtime_logger().warning("filter.stat.failed", path=path, error=str(exc))
        self._terminal = EndWithError(exc)
        await self.upstream.request(exc)
        return self._terminal


def filter_entries(
    test: Predicate | str | None = None,
    *,
    follow_symlinks: bool = True,
    with_stats: bool = False,
    stat: StatFetcher | None = None,
) -> Callable[[Producer[Any]], FilterStage]:
    """Build a through-stage keeping entries for which ``test`` is true.

    ``test`` is a ``(path, stats)`` predicate or a shorthand name from
    ``SHORTHANDS``. With no test, or an unknown shorthand, nothing passes.
    ``follow_symlinks=False`` stats the link itself, which is what makes
    ``"is-symbolic-link"`` useful.
    """

    predicate = resolve_predicate(test)
    fetch = stat or stat_fetcher(follow_symlinks=follow_symlinks)

    def through(upstream: Producer[Any]) -> FilterStage:
        return FilterStage(upstream, predicate, fetch=fetch, with_stats=with_stats)

    return through
