"""
Typed failures raised by the export engine.

Per-record anomalies never reach this module: they are skipped and logged
where they happen. Everything here aborts a whole export attempt.
"""
from typing import Optional


class ReportExportError(Exception):
    """Base class for failures that abort one export attempt."""


class ResourceLoadError(ReportExportError):
    """
    Raised when an embeddable font resource cannot be fetched.

    Carries:
    - The resource name that failed (file name of the font)
    - The underlying reason, if known
    """

    def __init__(self, message: str, resource: Optional[str] = None, reason: Optional[str] = None):
        self.resource = resource
        self.reason = reason

        details = []
        if resource:
            details.append(f"Resource: {resource}")
        if reason:
            details.append(f"Reason: {reason}")

        full_message = f"{message}\n" + "\n".join(details) if details else message
        super().__init__(full_message)


class ArchiveBundleError(ReportExportError):
    """Raised when documents cannot be compressed into an archive."""

    def __init__(self, message: str, entry: Optional[str] = None, reason: Optional[str] = None):
        self.entry = entry
        self.reason = reason

        details = []
        if entry:
            details.append(f"Entry: {entry}")
        if reason:
            details.append(f"Reason: {reason}")

        full_message = f"{message}\n" + "\n".join(details) if details else message
        super().__init__(full_message)


class DocumentRenderError(ReportExportError):
    """Raised when a table cannot be laid out onto pages."""


class UnsupportedFormatError(ReportExportError):
    """Raised when a report kind has no layout for the requested format."""
