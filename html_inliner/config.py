"""Configuration objects and constants for the image inliner."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

DEFAULT_IMAGE_LIMIT = 5148

PluginEntry = Tuple[str, Any]

# Built-in optimizer plugin sequence, in the order it is handed to the optimizer.
DEFAULT_PLUGINS: Tuple[PluginEntry, ...] = (
    ("removeXMLProcInst", True),
    ("removeComments", True),
    ("removeMetadata", True),
    ("removeTitle", True),
    ("removeDesc", True),
    ("removeEditorsNSData", True),
    ("convertStyleToAttrs", True),
    ("convertColors", True),
    ("collapseGroups", True),
    ("cleanupIDs", True),
    ("cleanupNumericValues", 5),
    ("removeDimensions", False),
    ("minifyWhitespace", True),
)

_OPTION_ALIASES = {
    "runPreEmit": "run_pre_emit",
    "basePath": "base_path",
    "imageLimit": "image_limit",
    "svgoConfig": "optimizer_config",
    "srcRoot": "src_root",
    "distRoot": "dist_root",
}


def merge_plugin_config(
    defaults: Iterable[PluginEntry],
    overrides: Optional[Mapping[str, Any]] = None,
) -> List[PluginEntry]:
    """Merge plugin overrides into the default ordered sequence.

    Existing keys keep their position and take the override's value; keys the
    defaults do not know about are appended in the override's order.
    """
    merged: Dict[str, Any] = dict(defaults)
    if overrides:
        merged.update(overrides)
    return list(merged.items())


def load_optimizer_config(path: Path) -> Dict[str, Any]:
    """Read a JSON object of optimizer plugin overrides."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Optimizer config in {path} must be a JSON object")
    return data


@dataclass
class InlineConfig:
    """Settings that control how image references are rewritten."""

    src_root: Path = Path("src")
    dist_root: Path = Path("dist")
    base_path: str = ""
    image_limit: int = DEFAULT_IMAGE_LIMIT
    optimizer_config: Dict[str, Any] = field(default_factory=dict)
    run_pre_emit: bool = False

    @property
    def relocation_dir(self) -> Path:
        return self.dist_root / self.base_path

    def plugins(self, override: Optional[Mapping[str, Any]] = None) -> List[PluginEntry]:
        """Return the merged plugin sequence, preferring a per-document override."""
        if override is not None:
            return merge_plugin_config(DEFAULT_PLUGINS, override)
        return merge_plugin_config(DEFAULT_PLUGINS, self.optimizer_config)

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "InlineConfig":
        """Build a config from host options using camelCase or snake_case keys."""
        values: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                continue
            values[name] = value

        if "src_root" in values:
            values["src_root"] = Path(values["src_root"])
        if "dist_root" in values:
            values["dist_root"] = Path(values["dist_root"])
        values["run_pre_emit"] = bool(values.get("run_pre_emit"))
        values["base_path"] = values.get("base_path") or ""
        values["image_limit"] = int(values.get("image_limit") or DEFAULT_IMAGE_LIMIT)
        optimizer_config = values.get("optimizer_config")
        values["optimizer_config"] = (
            dict(optimizer_config) if isinstance(optimizer_config, Mapping) else {}
        )
        return cls(**values)
