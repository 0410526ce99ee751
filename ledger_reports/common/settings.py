"""
Runtime configuration.

Values come from environment variables, falling back to paths inside the
project checkout.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Defaults
DEFAULT_FONT_DIR = PROJECT_ROOT / "fonts"
DEFAULT_PREFERENCES_FILE = PROJECT_ROOT / "data" / "preferences.json"
DEFAULT_LOG_FILE = "logs/app.log"


@dataclass(frozen=True)
class Settings:
    """Settings for the export engine.

    Attributes:
        font_dir: Directory holding the embeddable TTF fonts.
        preferences_file: JSON file backing the preference store.
        log_level: Logging level name.
        log_file: Log file path, or None to log to the console only.
    """

    font_dir: Path = DEFAULT_FONT_DIR
    preferences_file: Path = DEFAULT_PREFERENCES_FILE
    log_level: str = "INFO"
    log_file: Optional[str] = DEFAULT_LOG_FILE

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Returns:
            Settings: Settings sourced from the environment.
        """
        font_dir = os.getenv("LEDGER_REPORTS_FONT_DIR")
        preferences_file = os.getenv("LEDGER_REPORTS_PREFERENCES_FILE")
        log_level = os.getenv("LEDGER_REPORTS_LOG_LEVEL", "INFO").strip().upper()
        log_file = os.getenv("LEDGER_REPORTS_LOG_FILE", DEFAULT_LOG_FILE).strip()
        return cls(
            font_dir=Path(font_dir).expanduser() if font_dir else DEFAULT_FONT_DIR,
            preferences_file=(
                Path(preferences_file).expanduser() if preferences_file else DEFAULT_PREFERENCES_FILE
            ),
            log_level=log_level,
            log_file=log_file or None,
        )

    @property
    def log_level_value(self) -> int:
        """Numeric logging level; unknown names fall back to INFO."""
        value = logging.getLevelName(self.log_level)
        return value if isinstance(value, int) else logging.INFO


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings, reading the environment once."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
