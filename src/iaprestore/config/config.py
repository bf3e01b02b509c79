"""Configuration management for iaprestore."""

import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

from iaprestore.config.file_ops import write_text_file
from iaprestore.config.paths import default_config_path
from iaprestore.platform.logging import logger


def _path_field(default: Path | None = None) -> Any:
    """Create a field for Path objects with proper conversion.

    Args:
        default: Default value for the field.

    Returns:
        Field with proper metadata for path handling.
    """
    return field(default=default, metadata={"path": True})


@dataclass
class Config:
    """Application configuration."""

    # Log file path
    log_file: Path | None = _path_field()

    # Restore defaults
    finalize_automatically: bool = True
    application_username: str | None = None

    # Singleton instance
    _instance: ClassVar["Config | None"] = None
    _loaded_from: ClassVar[Path | None] = None

    def __post_init__(self) -> None:
        """Convert string paths and validate restore defaults."""

        for f in fields(self):
            if not f.metadata.get("path", False):
                continue
            value = getattr(self, f.name)
            if isinstance(value, str):
                setattr(self, f.name, Path(value) if value.strip() else None)

        if not isinstance(self.finalize_automatically, bool):
            raise ValueError("finalize_automatically must be true or false")
        if self.application_username is not None:
            if not isinstance(self.application_username, str):
                raise ValueError("application_username must be a string")
            self.application_username = self.application_username.strip() or None

    def save(self, path: Path | None = None) -> Path:
        """Save configuration to file and return the written path."""
        config_dict = asdict(self)

        for key, value in config_dict.items():
            if isinstance(value, Path):
                config_dict[key] = str(value)

        target = default_config_path(path)
        try:
            write_text_file(target, self._render_toml(config_dict))
            logger.info("Configuration saved to %s", target)
        except OSError as e:
            logger.error("Failed to save configuration: %s", e)
            raise
        return target

    def _render_toml(self, config: dict[str, Any]) -> str:
        """Render configuration as TOML with inline guidance."""

        lines: list[str] = []

        lines.append("# iaprestore Configuration File")
        lines.append("")

        lines.append("# Log file path (optional)")
        lines.append('# Example: log_file = "/path/to/logs/iaprestore.log"')
        if config["log_file"] is not None:
            lines.append(f"log_file = {self._format_toml_value(config['log_file'])}")
        lines.append("")

        lines.append("# Finalize restored transactions as soon as they are seen (default true)")
        lines.append("# Set to false to leave finalization to the caller")
        lines.append(
            f"finalize_automatically = {self._format_toml_value(config['finalize_automatically'])}"
        )
        lines.append("")

        lines.append("# Opaque account identifier forwarded to the purchase queue (optional)")
        if config.get("application_username"):
            lines.append(
                f"application_username = {self._format_toml_value(config['application_username'])}"
            )
        lines.append("")

        return "\n".join(lines)

    def _format_toml_value(self, value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, Path)):
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return str(value)

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load configuration from file.

        A missing file yields defaults. The result is cached per source path.

        Args:
            path: Explicit config file; defaults to ``default_config_path()``.

        Returns:
            Config: Loaded configuration object.
        """
        config_file = default_config_path(path)
        if cls._instance is not None and cls._loaded_from == config_file:
            return cls._instance

        if not config_file.exists():
            instance = cls()
        else:
            try:
                with open(config_file, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.error("Failed to load configuration: %s", e)
                raise

            known = {f.name for f in fields(cls)}
            for key in sorted(set(config_dict) - known):
                logger.warning("Ignoring unknown configuration key: %s", key)
                del config_dict[key]

            instance = cls(**config_dict)
            logger.info("Configuration loaded from %s", config_file)

        cls._instance = instance
        cls._loaded_from = config_file
        return instance


# Global configuration instance
config = Config.load()
