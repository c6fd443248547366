"""Shared fixtures for the animatch test-suite."""

import pytest

from animatch.utils import config as cfg


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp dir and drop ANIMATCH_SEARCH_* env vars.

    Keeps tests independent of the developer's own ~/.config/animatch.
    """
    config_dir = tmp_path / "config" / "animatch"
    monkeypatch.setattr(cfg, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(cfg, "CONFIG_FILE", config_dir / "config.toml")
    for var in (
        "ANIMATCH_SEARCH_SOURCE",
        "ANIMATCH_SEARCH_PER_PAGE",
        "ANIMATCH_SEARCH_TIMEOUT",
        "ANIMATCH_SEARCH_CATALOG_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    return config_dir
