"""Command-line entry point for inlining images into built HTML."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Sequence

from .config import DEFAULT_IMAGE_LIMIT, InlineConfig, load_optimizer_config
from .pipeline import DocumentResult, HtmlPluginData, InlineImagesPlugin, write_output

logger = logging.getLogger("html_inliner.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Replace local <img> references in built HTML with inline SVG, "
            "base64 data URIs or relocated assets."
        ),
    )
    parser.add_argument(
        "output_dir",
        type=Path,
        help="Directory holding the emitted HTML files",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="HTML file names relative to the output directory (default: every *.html)",
    )
    parser.add_argument(
        "--src",
        default="src",
        type=Path,
        help="Directory image sources are resolved against",
    )
    parser.add_argument(
        "--dist",
        default="dist",
        type=Path,
        help="Directory large images are relocated into",
    )
    parser.add_argument(
        "--base-path",
        default="",
        help="Subdirectory of --dist for relocated images, also used as the URL prefix",
    )
    parser.add_argument(
        "--image-limit",
        type=int,
        default=DEFAULT_IMAGE_LIMIT,
        help="Raster images at or above this many bytes are relocated instead of embedded",
    )
    parser.add_argument(
        "--optimizer-config",
        type=Path,
        default=None,
        help="JSON file with optimizer plugin overrides",
    )
    parser.add_argument(
        "--pre-emit",
        action="store_true",
        help="Rewrite each file in memory as it is read instead of after all are captured",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(list(sys.argv[1:] if argv is None else argv))


def _discover_files(output_dir: Path, names: Sequence[str]) -> List[str]:
    if names:
        return list(names)
    return sorted(
        str(path.relative_to(output_dir)) for path in output_dir.rglob("*.html")
    )


def _read_html(output_dir: Path, name: str) -> str:
    return (output_dir / name).read_text(encoding="utf-8")


def _unreadable(name: str, exc: OSError) -> DocumentResult:
    logger.error("Could not read %s: %s", name, exc)
    return DocumentResult(filename=name, output_path=None, written=False, error=str(exc))


async def _run_pre_emit(
    plugin: InlineImagesPlugin,
    output_dir: Path,
    names: Sequence[str],
) -> List[DocumentResult]:
    results: List[DocumentResult] = []
    for name in names:
        try:
            original = _read_html(output_dir, name)
        except OSError as exc:
            results.append(_unreadable(name, exc))
            continue
        data = await plugin.after_html_processing(
            HtmlPluginData(html=original, output_name=name)
        )
        result = DocumentResult(filename=name, output_path=None, written=False)
        if data.html != original:
            try:
                result.output_path = write_output(data.html, output_dir, name)
                result.written = True
            except OSError as exc:
                logger.error("Failed to write %s: %s", name, exc)
                result.error = str(exc)
        results.append(result)
    return results


async def _run_post_emit(
    plugin: InlineImagesPlugin,
    output_dir: Path,
    names: Sequence[str],
) -> List[DocumentResult]:
    results: List[DocumentResult] = []
    for name in names:
        try:
            html = _read_html(output_dir, name)
        except OSError as exc:
            results.append(_unreadable(name, exc))
            continue
        plugin.after_html_emit(HtmlPluginData(html=html, output_name=name), output_dir)
    results.extend(await plugin.after_emit())
    return results


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    output_dir = Path(args.output_dir).resolve()
    if not output_dir.is_dir():
        logger.error("Output directory %s does not exist", output_dir)
        return 1

    try:
        optimizer_config = (
            load_optimizer_config(args.optimizer_config) if args.optimizer_config else {}
        )
    except (OSError, ValueError) as exc:
        logger.error("Could not load optimizer config: %s", exc)
        return 1

    config = InlineConfig(
        src_root=args.src,
        dist_root=args.dist,
        base_path=args.base_path,
        image_limit=args.image_limit,
        optimizer_config=optimizer_config,
        run_pre_emit=args.pre_emit,
    )
    plugin = InlineImagesPlugin(config)
    names = _discover_files(output_dir, args.files)

    overall_start = time.perf_counter()
    if plugin.run_pre_emit:
        results = asyncio.run(_run_pre_emit(plugin, output_dir, names))
    else:
        results = asyncio.run(_run_post_emit(plugin, output_dir, names))
    total_elapsed = time.perf_counter() - overall_start

    written = sum(1 for result in results if result.written)
    errors = [result for result in results if result.error]
    logger.info(
        "Finished in %.2fs (%d/%d files rewritten, %d failed)",
        total_elapsed,
        written,
        len(names),
        len(errors),
    )
    for result in results:
        logger.debug(
            "%s -> replaced: %d | failed: %d | written: %s",
            result.filename,
            result.replaced,
            result.failed,
            result.written,
        )
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
