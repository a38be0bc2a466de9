from __future__ import annotations

import pytest

from bundlepipe.fakes_test import GREET_MODULE
from bundlepipe.model import PipelineConfig
from bundlepipe.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def quiet_console():
    set_console(Console(debug=False))
    yield
    set_console(Console(debug=False))


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A workspace with the interop entry module in place."""
    entry = tmp_path / "Interop" / "JS.fs.js"
    entry.parent.mkdir(parents=True)
    entry.write_text(GREET_MODULE, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config():
    return PipelineConfig()
