"""Shared fixtures for streamedit tests."""

import logging
import os

import pytest
import yaml

from streamedit import config as config_module


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """Point the global config location at a throwaway directory."""
    home = tmp_path_factory.mktemp("home") / ".streamedit"
    monkeypatch.setattr(config_module, "CONFIG_DIR", home)
    monkeypatch.setattr(config_module, "CONFIG_FILE", home / "config.yml")
    monkeypatch.delenv("STREAMEDIT_MODEL_ID", raising=False)
    monkeypatch.delenv("STREAMEDIT_VERBOSE", raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_streamedit_logger():
    """Drop handlers the CLI attached to streams that no longer exist."""
    yield
    logger = logging.getLogger("streamedit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def tmp_dir(tmp_path):
    """Provide a temporary directory and cd into it."""
    orig = os.getcwd()
    os.chdir(tmp_path)
    yield tmp_path
    os.chdir(orig)


@pytest.fixture
def sample_config_data():
    """Minimal .streamedit.yml data dict."""
    return {
        "verbose": False,
        "log-file": "",
        "html-unescape": "auto",
        "model-id": "deepseek-chat",
        "strip-code-fences": True,
        "backward-params": ["write_to_file.content"],
    }


@pytest.fixture
def config_yaml_file(tmp_dir, sample_config_data):
    """Write a config YAML to tmp_dir and return its Path."""
    path = tmp_dir / ".streamedit.yml"
    with open(path, "w") as f:
        yaml.dump(sample_config_data, f, default_flow_style=False)
    return path
