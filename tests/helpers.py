from __future__ import annotations

import asyncio
import os
import stat
from typing import Sequence


def fake_stats(mode: int, size: int = 0) -> os.stat_result:
    return os.stat_result((mode, 0, 0, 1, 0, 0, size, 0, 0, 0))


FILE = fake_stats(stat.S_IFREG | 0o644, size=12)
DIRECTORY = fake_stats(stat.S_IFDIR | 0o755)


def fixed_lister(names: Sequence[str]):
    calls: list[str] = []

    async def lister(path: str) -> list[str]:
        calls.append(path)
        return list(names)

    lister.calls = calls  # type: ignore[attr-defined]
    return lister


def deferred_lister(result: asyncio.Future[list[str]]):
    calls: list[str] = []

    async def lister(path: str) -> list[str]:
        calls.append(path)
        return await result

    lister.calls = calls  # type: ignore[attr-defined]
    return lister


def table_stat(table: dict[str, os.stat_result | Exception]):
    calls: list[str] = []

    async def fetch(path: str) -> os.stat_result:
        calls.append(path)
        value = table[path]
        if isinstance(value, Exception):
            raise value
        return value

    fetch.calls = calls  # type: ignore[attr-defined]
    return fetch
