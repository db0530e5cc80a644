"""Per-traversal cache of raw source text for line-oriented rules."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..errors import FileUnavailable
from .fileio import read_text_file

logger = logging.getLogger(__name__)


def split_lines(text: str) -> Tuple[str, ...]:
    """Split on ``\\n`` only; a final newline does not open an extra line."""

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return tuple(lines)


class TextIndex:
    """Lazily read and cache file text for the lifetime of one traversal.

    Nothing is shared between instances, so a file edited between two
    traversals is always read fresh.
    """

    def __init__(self) -> None:
        self._text: Dict[str, str] = {}
        self._lines: Dict[str, Tuple[str, ...]] = {}
        self.reads = 0

    def text(self, path: str) -> str:
        key = str(path)
        if key not in self._text:
            self._text[key] = self._read(key)
        return self._text[key]

    def lines(self, path: str) -> Tuple[str, ...]:
        key = str(path)
        if key not in self._lines:
            self._lines[key] = split_lines(self.text(key))
        return self._lines[key]

    def _read(self, key: str) -> str:
        file_path = Path(key)
        if not file_path.is_file():
            raise FileUnavailable(key, "no such file")
        try:
            text = read_text_file(file_path)
        except (OSError, UnicodeDecodeError) as exc:
            raise FileUnavailable(key, str(exc)) from exc
        self.reads += 1
        logger.debug("Indexed %s (%d bytes)", key, len(text))
        return text


class SourceText:
    """Read-only accessor handed to rules, bound to a default file path."""

    def __init__(self, index: TextIndex, default_path: Optional[str] = None) -> None:
        self._index = index
        self._default_path = default_path

    @property
    def default_path(self) -> Optional[str]:
        return self._default_path

    def _resolve(self, path: Optional[str]) -> str:
        resolved = path or self._default_path
        if not resolved:
            raise FileUnavailable(None, "node has no source file")
        return resolved

    def text(self, path: Optional[str] = None) -> str:
        return self._index.text(self._resolve(path))

    def lines(self, path: Optional[str] = None) -> Tuple[str, ...]:
        return self._index.lines(self._resolve(path))
