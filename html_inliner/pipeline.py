"""Document-level orchestration and the host build hooks."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import InlineConfig
from .models import Document
from .optimizer import ScourOptimizer, SvgOptimizer
from .rewriter import rewrite_html

logger = logging.getLogger("html_inliner")


class ConfigurationError(ValueError):
    """Raised when the host did not supply an output path or filename."""


@dataclass
class HtmlPluginData:
    """HTML handed over by the host for one output file."""

    html: str
    output_name: Optional[str] = None
    optimizer_config: Optional[Dict[str, Any]] = None


@dataclass
class DocumentResult:
    """Outcome of rewriting and persisting a single document."""

    filename: str
    output_path: Optional[Path]
    written: bool
    replaced: int = 0
    failed: int = 0
    error: Optional[str] = None


def write_output(html: str, output_dir: Union[str, Path, None], filename: Optional[str]) -> Path:
    """Write the rewritten HTML over the host's emitted file."""
    if not output_dir or not filename:
        raise ConfigurationError("output path and filename must be set to update output file")
    output_path = Path(output_dir) / filename
    output_path.write_text(html, encoding="utf-8")
    logger.info("Saved inlined HTML to %s", output_path)
    return output_path


async def process_document(
    document: Document,
    config: InlineConfig,
    optimizer: SvgOptimizer,
    output_dir: Union[str, Path],
    optimizer_config: Optional[Dict[str, Any]] = None,
) -> DocumentResult:
    try:
        result = await rewrite_html(
            document.original_html, config, optimizer, optimizer_config
        )
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Image inlining failed for %s; leaving it as emitted", document.filename)
        return DocumentResult(
            filename=document.filename,
            output_path=None,
            written=False,
            error=str(exc) or type(exc).__name__,
        )
    outcome = DocumentResult(
        filename=document.filename,
        output_path=None,
        written=False,
        replaced=result.replaced,
        failed=result.failed,
    )
    if not result.changed:
        return outcome
    try:
        outcome.output_path = await asyncio.to_thread(
            write_output, result.html, output_dir, document.filename
        )
    except OSError as exc:
        logger.error("Failed to write %s: %s", document.filename, exc)
        outcome.error = str(exc)
        return outcome
    outcome.written = True
    return outcome


async def process_documents(
    documents: Sequence[Document],
    config: InlineConfig,
    optimizer: SvgOptimizer,
    output_dir: Union[str, Path],
    optimizer_configs: Optional[Sequence[Optional[Dict[str, Any]]]] = None,
) -> List[DocumentResult]:
    """Rewrite documents concurrently; each run keeps its own processed set."""
    overrides = list(optimizer_configs or [None] * len(documents))
    return list(
        await asyncio.gather(
            *(
                process_document(document, config, optimizer, output_dir, override)
                for document, override in zip(documents, overrides)
            )
        )
    )


@dataclass
class _CapturedFile:
    document: Document
    optimizer_config: Optional[Dict[str, Any]] = None


class InlineImagesPlugin:
    """Hooks a host build calls to have image references inlined.

    With ``run_pre_emit`` the HTML is rewritten in memory before the host
    writes it. Otherwise each emitted file is captured and, once the host
    has emitted everything, rewritten and written over the emitted output.
    """

    def __init__(
        self,
        config: Optional[InlineConfig] = None,
        optimizer: Optional[SvgOptimizer] = None,
    ) -> None:
        self.config = config or InlineConfig()
        self.optimizer = optimizer or ScourOptimizer()
        self.output_path: Optional[Path] = None
        self._files: List[_CapturedFile] = []

    @property
    def run_pre_emit(self) -> bool:
        return self.config.run_pre_emit

    @property
    def files(self) -> List[Document]:
        return [captured.document for captured in self._files]

    async def after_html_processing(self, data: HtmlPluginData) -> HtmlPluginData:
        """Rewrite ``data.html`` in place before the host emits it."""
        try:
            result = await rewrite_html(
                data.html, self.config, self.optimizer, data.optimizer_config
            )
        except Exception:  # pylint: disable=broad-except
            logger.exception("Image inlining failed; keeping original HTML")
            return data
        if result.changed:
            data.html = result.html
        return data

    def after_html_emit(
        self,
        data: HtmlPluginData,
        output_path: Union[str, Path, None],
    ) -> HtmlPluginData:
        """Capture an emitted file so it can be rewritten after the build."""
        if not output_path:
            logger.error("No output path supplied by the host; skipping %s", data.output_name)
            return data
        if not data.output_name:
            logger.error("No output filename supplied by the host; skipping")
            return data
        self.output_path = Path(output_path)
        self._files.append(
            _CapturedFile(
                document=Document(filename=data.output_name, original_html=data.html),
                optimizer_config=data.optimizer_config,
            )
        )
        return data

    async def after_emit(self) -> List[DocumentResult]:
        """Rewrite and persist every captured file."""
        if not self._files:
            logger.info("No files passed for image inlining")
            return []
        if self.output_path is None:
            raise ConfigurationError("output path must be set to update output files")
        return await process_documents(
            [captured.document for captured in self._files],
            self.config,
            self.optimizer,
            self.output_path,
            [captured.optimizer_config for captured in self._files],
        )
