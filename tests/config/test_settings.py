"""Tests for settings module behavior."""

from __future__ import annotations

import importlib
from pathlib import Path


def test_finalize_automatically_defaults_true(config_runtime_env: Path) -> None:
    """Default configuration finalizes restored transactions automatically."""
    _ = config_runtime_env

    import iaprestore.config.config as config_module
    import iaprestore.config.settings as settings

    config_module.config = config_module.Config.load()
    reloaded = importlib.reload(settings)

    assert reloaded.FINALIZE_AUTOMATICALLY is True
    assert reloaded.DEFAULT_APPLICATION_USERNAME is None


def test_settings_follow_config_values(config_runtime_env: Path) -> None:
    _ = config_runtime_env

    import iaprestore.config.config as config_module
    import iaprestore.config.settings as settings

    config_module.config = config_module.Config(
        finalize_automatically=False,
        application_username="player-7",
    )
    reloaded = importlib.reload(settings)

    assert reloaded.FINALIZE_AUTOMATICALLY is False
    assert reloaded.DEFAULT_APPLICATION_USERNAME == "player-7"
