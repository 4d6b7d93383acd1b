"""Local filesystem access for entry content files."""

from __future__ import annotations

from pathlib import Path


class LocalFileStore:
    """Reads content files relative to a fixed content root."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def exists(self, path: str) -> bool:
        return (self._root / path).is_file()

    def read_bytes(self, path: str) -> bytes:
        return (self._root / path).read_bytes()
