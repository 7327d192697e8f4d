"""Settings for FinCoach.

Settings live in an optional JSON file next to the data. Everything has a
sensible default, so a missing file is not an error.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from fincoach.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "fincoach.config.json"


class CoachSettings(BaseModel):
    """Configuration for the coach.

    Attributes:
        currency: Display currency code (formatting only, no conversion).
        spending_window_days: Lookback for monthly income/expense figures.
        volatility_window_days: Lookback for income volatility.
        emergency_months_target: Months of expenses an emergency fund should cover.
        data_file: Snapshot JSON file used by the CLI.
    """

    currency: str = Field(default="USD", min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    spending_window_days: int = Field(default=30, ge=1)
    volatility_window_days: int = Field(default=90, ge=1)
    emergency_months_target: int = Field(default=6, ge=1)
    data_file: str = "fincoach.json"


def load_settings(path: Path | None = None) -> CoachSettings:
    """Load settings from a JSON file.

    Args:
        path: Settings file. Defaults to fincoach.config.json in the
            current directory.

    Returns:
        Parsed settings, or defaults when the file does not exist.

    Raises:
        ConfigError: If the file exists but is not valid.
    """
    config_path = path or Path.cwd() / DEFAULT_CONFIG_FILE
    if not config_path.exists():
        logger.debug("No settings file at %s, using defaults", config_path)
        return CoachSettings()

    try:
        return CoachSettings.model_validate_json(config_path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {config_path}: {e}") from e
