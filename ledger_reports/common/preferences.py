"""
Preference Store

Remembers small user choices between sessions in a local JSON file.
Currently only the organization label printed on PDF headers and footers.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ledger_reports.common.logging_config import get_logger
from ledger_reports.common.settings import get_settings

logger = get_logger(__name__)

ORGANIZATION_LABEL_KEY = "organization_label"


class PreferenceStore:
    """
    Key-value store backed by one JSON file.

    A missing or unreadable file behaves as an empty store; write failures
    are logged and never abort the export that triggered them.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_settings().preferences_file

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read preferences: {e}", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        data['updated_at'] = datetime.now().isoformat()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to save preference: {e}", key=key, path=str(self.path))

    def get_organization_label(self) -> str:
        """Last organization label entered, or an empty string."""
        return self.get(ORGANIZATION_LABEL_KEY) or ""

    def remember_organization_label(self, label: str) -> bool:
        """
        Store the label for the next export dialog.

        Blank labels are not stored, so a previous label survives an export
        made without one.

        Returns:
            True if the label was written
        """
        label = (label or "").strip()
        if not label:
            return False
        self.set(ORGANIZATION_LABEL_KEY, label)
        return True
