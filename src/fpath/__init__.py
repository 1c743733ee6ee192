"""Pull-stream helpers for walking directory entries and filtering by stats.

    from fpath import collect, entries, filter, pipe

    dirs = await collect(pipe(entries("."), filter("is-directory")))
"""

from fpath.fs.entries import entries
from fpath.fs.filtering import SHORTHANDS, Entry, filter_entries
from fpath.fs.ignore import IgnoreRules
from fpath.protocol.pull import (
    ConcurrentPullError,
    EndOfStream,
    EndWithError,
    FpathError,
    Item,
    collect,
    iterate,
    pipe,
)
from fpath.version import __version__

filter = filter_entries  # noqa: A001

__all__ = [
    "ConcurrentPullError",
    "EndOfStream",
    "EndWithError",
    "Entry",
    "FpathError",
    "IgnoreRules",
    "Item",
    "SHORTHANDS",
    "__version__",
    "collect",
    "entries",
    "filter",
    "filter_entries",
    "iterate",
    "pipe",
]
