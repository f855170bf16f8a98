"""Shared fixtures for the image inliner tests."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import pytest

from html_inliner.config import InlineConfig, PluginEntry


class StubOptimizer:
    """Optimizer double that records calls and returns a fixed result."""

    def __init__(self, result: str | None = None, fail_on: Sequence[str] = ()) -> None:
        self.result = result
        self.fail_on = tuple(fail_on)
        self.calls: List[Tuple[str, List[PluginEntry]]] = []

    def optimize(self, svg: str, plugins):
        from html_inliner.optimizer import OptimizerError

        self.calls.append((svg, list(plugins)))
        if any(marker in svg for marker in self.fail_on):
            raise OptimizerError("stub failure")
        return self.result if self.result is not None else svg.strip()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A build project with ``src`` and ``dist`` directories as the working dir."""
    (tmp_path / "src").mkdir()
    (tmp_path / "dist").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config(project: Path) -> InlineConfig:
    return InlineConfig(
        src_root=project / "src",
        dist_root=project / "dist",
        base_path="images/",
    )


@pytest.fixture
def optimizer() -> StubOptimizer:
    return StubOptimizer()


def write_bytes(path: Path, size: int) -> bytes:
    data = (b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * (size // 256 + 1))[:size]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return data
