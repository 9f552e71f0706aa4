"""Configuration management for SQL Server to ERD tool."""

import os
import json
import logging
import re
from typing import Any, Dict, Optional
from pathlib import Path
from dotenv import load_dotenv
from pydantic import ValidationError

from .models import CatalogSnapshot, ERDConfig, RenderOptions


logger = logging.getLogger(__name__)


OUTPUT_EXTENSIONS = (".puml", ".plantuml", ".pu")

_LINE_COMMENT = re.compile(r'^\s*//.*$', re.MULTILINE)


class Config:
    """Configuration manager for the SQL Server to ERD tool."""

    def __init__(self, env_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            env_file: Path to .env file. If None, looks for .env in current directory.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            # Look for .env file in current directory and parent directories
            current_dir = Path.cwd()
            for parent in [current_dir] + list(current_dir.parents):
                env_path = parent / ".env"
                if env_path.exists():
                    load_dotenv(env_path)
                    break

    def get_erd_config(self, **overrides) -> ERDConfig:
        """Get ERD configuration from environment variables.

        Args:
            **overrides: Configuration overrides

        Returns:
            ERDConfig instance
        """
        config_data = {
            "connection_string": self._get_env("CONNECTION_STRING"),
            "snapshot_file": self._get_env("SNAPSHOT_FILE"),
            "output_file": self._get_env("OUTPUT_FILE", default="erd_output.puml"),
            "diagram_style": self._get_env("DIAGRAM_TYPE", default="entity"),
            "config_file": self._get_env("CONFIG_FILE"),
            "log_level": self._get_env("LOG_LEVEL", default="INFO"),
            "log_file": self._get_env("LOG_FILE"),
        }

        # Apply overrides
        config_data.update(overrides)

        return ERDConfig(**config_data)

    def load_render_options(self, config_file: Optional[str] = None) -> RenderOptions:
        """Load render options from a JSON file.

        Keys are matched ignoring case and underscores, so ``MaxTables``,
        ``maxTables`` and ``max_tables`` are equivalent. ``//`` line comments
        are allowed. A missing or unreadable file yields the defaults.

        Args:
            config_file: Path to the JSON options file

        Returns:
            RenderOptions instance
        """
        if not config_file or not Path(config_file).exists():
            return RenderOptions()

        try:
            logger.info(f"Loading configuration from {config_file}")
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.loads(_LINE_COMMENT.sub('', f.read()))
            if not isinstance(data, dict):
                raise ValueError("Configuration root must be a JSON object")
            return RenderOptions(**normalize_option_keys(data))
        except (json.JSONDecodeError, OSError, ValueError) as e:
            logger.warning(f"Error loading configuration file, using defaults: {e}")
            return RenderOptions()

    def load_snapshot(self, snapshot_file: str) -> CatalogSnapshot:
        """Load a catalog snapshot from a JSON file.

        Args:
            snapshot_file: Path to the snapshot file

        Returns:
            CatalogSnapshot instance

        Raises:
            ValueError: If the file cannot be read or parsed
        """
        try:
            with open(snapshot_file, 'r', encoding='utf-8') as f:
                return CatalogSnapshot(**json.load(f))
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            raise ValueError(f"Error loading catalog snapshot {snapshot_file}: {e}")

    def apply_overrides(self, options: RenderOptions, **overrides) -> RenderOptions:
        """Apply command line values to render options.

        Values that are None or empty lists were not given and are ignored.

        Args:
            options: Options loaded from the configuration file
            **overrides: Command line values by option field name

        Returns:
            New RenderOptions instance
        """
        given = {key: value for key, value in overrides.items() if value not in (None, [], ())}
        if not given:
            return options
        return RenderOptions(**{**options.model_dump(), **given})

    def validate_config(self, config: ERDConfig) -> None:
        """Validate configuration.

        Args:
            config: ERDConfig to validate

        Raises:
            ValueError: If configuration is invalid
        """
        if not config.connection_string and not config.snapshot_file:
            raise ValueError("A connection string or a catalog snapshot file is required")

        if config.snapshot_file and not Path(config.snapshot_file).exists():
            raise ValueError(f"Catalog snapshot file {config.snapshot_file} does not exist")

        output_path = Path(config.output_file)
        if output_path.suffix.lower() not in OUTPUT_EXTENSIONS:
            raise ValueError("Output file must have a PlantUML extension (.puml, .plantuml, or .pu)")

        # Validate output file path
        output_dir = output_path.parent
        if not output_dir.exists():
            try:
                logger.info(f"Creating output directory: {output_dir}")
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ValueError(f"Cannot create output directory {output_dir}: {e}")

    def _get_env(self, key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """Get environment variable.

        Args:
            key: Environment variable name
            default: Default value if not set
            required: Whether the variable is required

        Returns:
            Environment variable value

        Raises:
            ValueError: If required variable is not set
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ValueError(f"Required environment variable {key} is not set")
        return value


def normalize_option_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map option keys to RenderOptions field names ignoring case and underscores.

    Unknown keys are dropped with a warning.
    """
    fields = {name.replace('_', '').lower(): name for name in RenderOptions.model_fields}
    normalized = {}
    for key, value in data.items():
        field_name = fields.get(key.replace('_', '').lower())
        if field_name is None:
            logger.warning(f"Ignoring unknown configuration key '{key}'")
            continue
        normalized[field_name] = value
    return normalized
