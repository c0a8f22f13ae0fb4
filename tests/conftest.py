from __future__ import annotations

from importlib import resources
from pathlib import Path

import pytest
from typer.testing import CliRunner

from callback_bridge.cli.main import app
from callback_bridge.core.signal import LastErrorSlot


class CountingSlot(LastErrorSlot):
    """Error slot that records how often it was read."""

    def __init__(self) -> None:
        super().__init__()
        self.reads = 0

    def get(self):  # type: ignore[no-untyped-def]
        self.reads += 1
        return super().get()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def catalog_file() -> Path:
    with resources.as_file(resources.files("callback_bridge.resources.catalogs") / "chrome.yaml") as ref:
        return Path(ref)


@pytest.fixture()
def error_slot() -> CountingSlot:
    return CountingSlot()


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_app():
    return app


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    monkeypatch.delenv("CALLBACK_BRIDGE_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
