"""Workspace content providers used for pattern harvesting."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

DEFAULT_EXCLUDES: tuple[str, ...] = ("node_modules", ".git")


class WorkspaceProvider(Protocol):
    """Anything that can list and read workspace files."""

    def find_files(self, pattern: str) -> list[str]: ...

    def read_file(self, path: str) -> str: ...


class FilesystemWorkspace:
    """WorkspaceProvider over a local directory tree.

    Paths returned by ``find_files`` are relative to ``root`` using forward
    slashes. Any path component listed in ``excludes`` is skipped.
    """

    def __init__(self, root: Path, excludes: tuple[str, ...] = DEFAULT_EXCLUDES) -> None:
        self.root = Path(root)
        self.excludes = excludes

    def find_files(self, pattern: str) -> list[str]:
        found: list[str] = []
        for path in sorted(self.root.glob(pattern)):
            relative = path.relative_to(self.root)
            if any(part in self.excludes for part in relative.parts):
                continue
            if path.is_file():
                found.append(relative.as_posix())
        return found

    def read_file(self, path: str) -> str:
        return (self.root / path).read_text(encoding="utf-8")
