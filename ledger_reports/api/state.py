"""
Process-wide service instances shared by the endpoints.

Import the getters from here instead of from main.py to avoid circular
imports; tests swap them through `app.dependency_overrides`.
"""
import threading
from typing import Optional

from ledger_reports.common.preferences import PreferenceStore
from ledger_reports.exporters.service import ReportExportService

_lock = threading.Lock()
_preferences: Optional[PreferenceStore] = None
_export_service: Optional[ReportExportService] = None


def get_preference_store() -> PreferenceStore:
    global _preferences
    with _lock:
        if _preferences is None:
            _preferences = PreferenceStore()
        return _preferences


def get_export_service() -> ReportExportService:
    global _export_service
    preferences = get_preference_store()
    with _lock:
        if _export_service is None:
            _export_service = ReportExportService(preferences=preferences)
        return _export_service
