"""Selection of the ``img`` nodes that point at inlinable local assets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from .config import InlineConfig
from .models import ProcessedSpans
from .tree import Node

logger = logging.getLogger("html_inliner")

IMAGE_TAG = "img"
IMAGE_EXTENSIONS = (".svg", ".png", ".jpg")


def image_source(node: Node) -> str:
    """Return the node's ``src`` when it mentions a supported extension."""
    src = node.attrs.get("src") or ""
    if any(extension in src for extension in IMAGE_EXTENSIONS):
        return src
    return ""


def resolve_source(src: str, config: InlineConfig) -> Path:
    return config.src_root / src


def is_eligible(node: Node, config: InlineConfig, processed: ProcessedSpans) -> bool:
    """Check whether a node is an unprocessed reference to a local image."""
    if node.name != IMAGE_TAG or node.start_offset is None:
        return False
    if node.start_offset in processed:
        return False
    src = image_source(node)
    if not src:
        return False
    try:
        return resolve_source(src, config).is_file()
    except OSError as exc:
        logger.debug("Cannot check image source %.80s: %s", src, exc)
        return False


def iter_candidates(
    root: Node,
    config: InlineConfig,
    processed: ProcessedSpans,
) -> Iterator[Node]:
    """Yield eligible nodes in document order."""
    stack = list(reversed(root.children))
    while stack:
        node = stack.pop()
        if is_eligible(node, config, processed):
            yield node
        else:
            stack.extend(reversed(node.children))


def first_candidate(
    root: Node,
    config: InlineConfig,
    processed: ProcessedSpans,
) -> Optional[Node]:
    candidate = next(iter_candidates(root, config, processed), None)
    if candidate is not None:
        logger.debug(
            "Next image candidate %s at offset %d",
            candidate.attrs.get("src"),
            candidate.start_offset,
        )
    return candidate
