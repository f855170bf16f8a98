"""Data models used throughout the rewrite pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class Strategy(Enum):
    """How an image reference gets replaced."""

    INLINE_SVG = "inline-svg"
    BASE64 = "base64"
    RELOCATE = "relocate"


@dataclass
class Document:
    """HTML captured from the host along with the file it belongs to."""

    filename: str
    original_html: str


@dataclass
class ImageAsset:
    """Local image resolved from an ``img`` reference."""

    src: str
    path: Path
    size: int
    strategy: Strategy
    mime_type: Optional[str] = None


@dataclass
class ProcessedSpans:
    """Spans of a single document buffer that have already been handled.

    Offsets are only comparable within one document, so every rewrite run
    owns its own instance.
    """

    _spans: Dict[int, int] = field(default_factory=dict)

    def mark_attempted(self, start: int, end: int) -> None:
        self._spans[start] = end

    def mark_replaced(self, start: int, fragment_length: int) -> None:
        self._spans[start] = start + fragment_length

    def __contains__(self, offset: int) -> bool:
        return any(start <= offset < end for start, end in self._spans.items())

    def __len__(self) -> int:
        return len(self._spans)

    @property
    def offsets(self) -> List[int]:
        return sorted(self._spans)
