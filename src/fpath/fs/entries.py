"""Pull-stream source over the direct children of one directory."""

from __future__ import annotations

import asyncio
import os
from collections import deque
from typing import Awaitable, Callable, Sequence

from fpath.protocol.pull import EndOfStream, EndSignal, EndWithError, Item, Response, answered
from fpath.runtime_logging import get_runtime_logger

Lister = Callable[[str], Awaitable[Sequence[str]]]


async def list_directory(path: str) -> list[str]:
    return await asyncio.to_thread(os.listdir, path)


class EntriesSource:
    """Yields ``os.path.join(target_path, name)`` for each directory entry.

    The listing is requested once, at construction. Pulls that arrive before
    it resolves are held and answered in arrival order once it does.
    """

    def __init__(self, target_path: str | os.PathLike[str], *, lister: Lister | None = None) -> None:
        self.target_path = os.fspath(target_path)
        self._lister = lister or list_directory
        self._names: deque[str] | None = None
        self._error: BaseException | None = None
        self._aborted = False
        self._holding: list[asyncio.Future[Response]] = []
        self._task = asyncio.get_running_loop().create_task(self._list())

    @property
    def resolved(self) -> bool:
        return self._names is not None or self._error is not None

    async def _list(self) -> None:
        try:
            names = await self._lister(self.target_path)
        except Exception as exc:
            if self._aborted:
                return
            self._error = exc
            get_runtime_logger().warning("entries.listing.failed", path=self.target_path, error=str(exc))
        else:
            if self._aborted:
                get_runtime_logger().debug("entries.listing.discarded", path=self.target_path)
                return
            self._names = deque(names)
            get_runtime_logger().debug(
                "entries.listing.resolved",
                path=self.target_path,
                count=len(self._names),
                holding=len(self._holding),
            )

        holding, self._holding = self._holding, []
        for fut in holding:
            self._respond(fut)

    def request(self, end: EndSignal | None = None) -> asyncio.Future[Response]:
        if end:
            self._abort()
            return answered(EndOfStream())

        fut: asyncio.Future[Response] = asyncio.get_running_loop().create_future()
        if self._aborted:
            fut.set_result(EndOfStream())
        elif not self.resolved:
            self._holding.append(fut)
        else:
            self._respond(fut)
        return fut

    def _respond(self, fut: asyncio.Future[Response]) -> None:
        if fut.done():
            return
        if self._error is not None:
            fut.set_result(EndWithError(self._error))
        elif not self._names:
            fut.set_result(EndOfStream())
        else:
            fut.set_result(Item(os.path.join(self.target_path, self._names.popleft())))

    def _abort(self) -> None:
        if self._aborted:
            return
        self._aborted = True
        self._names = deque()
        holding, self._holding = self._holding, []
        for fut in holding:
            if not fut.done():
                fut.set_result(EndOfStream())
        get_runtime_logger().debug("entries.aborted", path=self.target_path, released=len(holding))


def entries(target_path: str | os.PathLike[str], *, lister: Lister | None = None) -> EntriesSource:
    """Create a source of the entries directly inside ``target_path``.

    Must be called from a running event loop; the listing starts right away.
    """

    return EntriesSource(target_path, lister=lister)
