"""Where: src/iaprestore/config/settings.py
What: Derived runtime settings sourced from persisted configuration.
Why: Expose validated constants to feature layers without file I/O.
"""

from __future__ import annotations

from iaprestore.config.config import config as app_config

# Restore defaults ------------------------------------------------------------

# Policy applied when a caller does not choose one explicitly.
FINALIZE_AUTOMATICALLY: bool = bool(getattr(app_config, "finalize_automatically", True))

_username = getattr(app_config, "application_username", None)
DEFAULT_APPLICATION_USERNAME: str | None = (
    _username if isinstance(_username, str) and _username.strip() else None
)


__all__ = [
    "FINALIZE_AUTOMATICALLY",
    "DEFAULT_APPLICATION_USERNAME",
]
