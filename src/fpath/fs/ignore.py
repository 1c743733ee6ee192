"""Gitignore-style exclusion usable as a ``filter`` predicate."""

from __future__ import annotations

import os
import stat as stat_mode
from pathlib import Path
from typing import Iterable

import pathspec

DEFAULT_PATTERNS: tuple[str, ...] = (".git/",)


class IgnoreRules:
    """Reject paths matched by the root ``.gitignore`` or extra patterns.

    Instances are ``(path, stats)`` predicates, so they plug straight into
    ``fpath.filter``. Directory patterns (``build/``) only match entries whose
    stats say they are directories.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        patterns: Iterable[str] = (),
        *,
        read_gitignore: bool = True,
    ) -> None:
        self.root = Path(os.path.abspath(root))
        self._spec = self._build_spec(list(patterns), read_gitignore)

    def _build_spec(self, extra: list[str], read_gitignore: bool) -> pathspec.PathSpec:
        lines: list[str] = [*DEFAULT_PATTERNS, *extra]

        gitignore = self.root / ".gitignore"
        if read_gitignore and gitignore.exists():
            for line in gitignore.read_text(encoding="utf-8", errors="replace").splitlines():
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                lines.append(line)

        return pathspec.PathSpec.from_lines("gitwildmatch", lines)

    def ignored(self, path: str | os.PathLike[str], *, is_dir: bool = False) -> bool:
        try:
            rel = Path(os.path.abspath(path)).relative_to(self.root)
        except ValueError:
            return False

        rel_text = rel.as_posix()
        if is_dir:
            rel_text += "/"
        return self._spec.match_file(rel_text)

    def __call__(self, path: str, stats: os.stat_result) -> bool:
        return not self.ignored(path, is_dir=stat_mode.S_ISDIR(stats.st_mode))
