"""Rewrite loop that replaces image references one at a time."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .classifier import first_candidate, image_source, iter_candidates
from .config import InlineConfig
from .images import TransformError, describe_asset, transform_image
from .models import ProcessedSpans
from .optimizer import SvgOptimizer
from .tree import parse_fragment

logger = logging.getLogger("html_inliner")


@dataclass
class RewriteResult:
    """Final buffer for one document plus what happened along the way."""

    html: str
    changed: bool
    candidates: int = 0
    replaced: int = 0
    failed: int = 0


def splice(html: str, start: int, end: int, fragment: str) -> str:
    return html[:start] + fragment + html[end:]


async def rewrite_html(
    html: str,
    config: InlineConfig,
    optimizer: SvgOptimizer,
    optimizer_config: Optional[Mapping[str, Any]] = None,
) -> RewriteResult:
    """Replace every eligible ``img`` in ``html``.

    The buffer is re-parsed after each splice because every offset past the
    edit point moves. Each node gets at most one attempt; a failed attempt
    leaves the original element in place.
    """
    processed = ProcessedSpans()
    plugins = config.plugins(optimizer_config)

    candidates = list(iter_candidates(parse_fragment(html), config, processed))
    if not candidates:
        logger.info("No inlinable images found")
        return RewriteResult(html=html, changed=False)

    result = RewriteResult(html=html, changed=False, candidates=len(candidates))
    buffer = html
    while True:
        node = first_candidate(parse_fragment(buffer), config, processed)
        if node is None:
            break
        start, end = node.start_offset, node.end_offset
        processed.mark_attempted(start, end)
        src = image_source(node)
        try:
            asset = describe_asset(src, config)
            fragment = await asyncio.to_thread(
                transform_image, asset, config, optimizer, plugins
            )
        except TransformError as exc:
            logger.warning("Leaving %s in place: %s", src, exc)
            result.failed += 1
            continue
        buffer = splice(buffer, start, end, fragment)
        processed.mark_replaced(start, len(fragment))
        result.replaced += 1

    result.html = buffer
    result.changed = buffer != html
    return result
