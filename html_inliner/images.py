"""Image replacement strategies: inline SVG, base64 embedding and relocation."""

from __future__ import annotations

import base64
import html
import logging
import mimetypes
import shutil
from pathlib import Path
from typing import Optional, Sequence

from filetype import guess

from .classifier import resolve_source
from .config import InlineConfig, PluginEntry
from .models import ImageAsset, Strategy
from .optimizer import OptimizerError, SvgOptimizer

logger = logging.getLogger("html_inliner")

FALLBACK_MIME_TYPE = "application/octet-stream"


class TransformError(RuntimeError):
    """Raised when a single image reference cannot be replaced."""


def select_strategy(src: str, size: int, image_limit: int) -> Strategy:
    """Pick a strategy from the extension in ``src`` and the file size."""
    if ".svg" in src:
        return Strategy.INLINE_SVG
    if size >= image_limit:
        return Strategy.RELOCATE
    return Strategy.BASE64


def describe_asset(src: str, config: InlineConfig) -> ImageAsset:
    """Resolve ``src`` on disk and decide how it should be replaced."""
    path = resolve_source(src, config)
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise TransformError(f"Cannot stat {path}: {exc}") from exc
    strategy = select_strategy(src, size, config.image_limit)
    return ImageAsset(src=src, path=path, size=size, strategy=strategy)


def detect_mime_type(path: Path, data: bytes) -> str:
    """Guess a MIME type from the file name, falling back to its signature."""
    mime_type, _ = mimetypes.guess_type(str(path))
    if mime_type:
        return mime_type
    kind = guess(data)
    if kind:
        return kind.mime
    return FALLBACK_MIME_TYPE


def _img_tag(src: str) -> str:
    return f'<img src="{html.escape(src, quote=True)}">'


def inline_svg(
    asset: ImageAsset,
    optimizer: SvgOptimizer,
    plugins: Sequence[PluginEntry],
) -> str:
    try:
        svg = asset.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TransformError(f"Failed to read {asset.path}: {exc}") from exc
    try:
        return optimizer.optimize(svg, plugins)
    except OptimizerError as exc:
        raise TransformError(f"Failed to optimize {asset.path}: {exc}") from exc


def embed_base64(asset: ImageAsset) -> str:
    try:
        data = asset.path.read_bytes()
    except OSError as exc:
        raise TransformError(f"Failed to read {asset.path}: {exc}") from exc
    asset.mime_type = detect_mime_type(asset.path, data)
    encoded = base64.b64encode(data).decode("ascii")
    return _img_tag(f"data:{asset.mime_type};base64,{encoded}")


def relocate_image(asset: ImageAsset, config: InlineConfig) -> str:
    """Copy a large image into the dist tree and point a new ``img`` at it."""
    filename = asset.src.split("/")[-1]
    destination_dir = config.relocation_dir
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(asset.path, destination_dir / filename)
    except OSError as exc:
        raise TransformError(
            f"Failed to copy {asset.path} to {destination_dir}: {exc}"
        ) from exc
    logger.debug("Relocated %s to %s", asset.path, destination_dir / filename)
    return _img_tag(f"./{config.base_path}{filename}")


def transform_image(
    asset: ImageAsset,
    config: InlineConfig,
    optimizer: SvgOptimizer,
    plugins: Optional[Sequence[PluginEntry]] = None,
) -> str:
    """Produce the HTML fragment that replaces ``asset``'s ``img`` element."""
    logger.debug(
        "Transforming %s (%d bytes) via %s", asset.src, asset.size, asset.strategy.value
    )
    if asset.strategy is Strategy.INLINE_SVG:
        return inline_svg(asset, optimizer, plugins if plugins is not None else config.plugins())
    if asset.strategy is Strategy.RELOCATE:
        return relocate_image(asset, config)
    return embed_base64(asset)
