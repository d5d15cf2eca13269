"""Common test fixtures."""

from pathlib import Path
from textwrap import dedent

import pytest

from zk_next.cli.commands.init import init_notebook
from zk_next.config import ConfigManager, NotebookConfig, ZkSettings
from zk_next.utils import setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Each test starts from the default stderr sink."""
    setup_logging()
    yield
    setup_logging()


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    """Isolated home directory; no zk-next variables leak in from the environment."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("ZKN_HOME", str(home))
    for name in ("ZKN_NOTEBOOK_PATH", "ZKN_DEBUG", "ZKN_LOG_LEVEL", "ZKN_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def settings(config_home) -> ZkSettings:
    return ZkSettings(home=config_home)


@pytest.fixture
def notebook(config_home) -> Path:
    """A freshly initialized notebook below the home directory."""
    root = config_home / "notes"
    root.mkdir()
    init_notebook(root)
    return root


@pytest.fixture
def notebook_config(settings, notebook) -> NotebookConfig:
    return ConfigManager(settings, cwd=notebook).load()


@pytest.fixture
def write_file():
    """Write dedented text to a path, creating parent directories."""

    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write
