"""SVG optimizer interface and the scour-backed default implementation."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, Dict, Protocol, Sequence, Tuple

from scour import scour

from .config import PluginEntry

logger = logging.getLogger("html_inliner")


class OptimizerError(RuntimeError):
    """Raised when an SVG document cannot be optimized."""


class SvgOptimizer(Protocol):
    def optimize(self, svg: str, plugins: Sequence[PluginEntry]) -> str:
        ...


# Plugin name -> (scour option, inverted)
_PLUGIN_OPTIONS: Dict[str, Tuple[str, bool]] = {
    "removeXMLProcInst": ("strip_xml_prolog", False),
    "removeComments": ("strip_comments", False),
    "removeMetadata": ("remove_metadata", False),
    "removeTitle": ("remove_titles", False),
    "removeDesc": ("remove_descriptions", False),
    "removeEditorsNSData": ("keep_editor_data", True),
    "convertStyleToAttrs": ("style_to_xml", False),
    "convertColors": ("simple_colors", False),
    "collapseGroups": ("group_collapse", False),
    "cleanupIDs": ("strip_ids", False),
    "removeDimensions": ("enable_viewboxing", False),
}


class ScourOptimizer:
    """Optimize SVG markup with scour, driven by svgo-style plugin names."""

    def build_options(self, plugins: Sequence[PluginEntry]) -> SimpleNamespace:
        options: Dict[str, Any] = {}
        for name, value in plugins:
            enabled = value is not False and value is not None
            if name == "cleanupNumericValues":
                if enabled and isinstance(value, int) and not isinstance(value, bool):
                    options["digits"] = value
                continue
            if name == "minifyWhitespace":
                options["indent_type"] = "none" if enabled else "space"
                options["newlines"] = not enabled
                continue
            if name not in _PLUGIN_OPTIONS:
                logger.debug("Optimizer plugin %s has no scour equivalent; ignored", name)
                continue
            option, inverted = _PLUGIN_OPTIONS[name]
            options[option] = not enabled if inverted else enabled
        return SimpleNamespace(**options)

    def optimize(self, svg: str, plugins: Sequence[PluginEntry]) -> str:
        options = self.build_options(plugins)
        try:
            result = scour.scourString(svg, options)
        except Exception as err:  # noqa: BLE001 - scour raises parser and value errors alike
            raise OptimizerError(f"scour failed: {err}") from err
        return result.strip()
