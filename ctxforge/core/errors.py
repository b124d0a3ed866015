from __future__ import annotations
from typing import List, Optional


class StorageError(Exception):
    """Base class for everything the storage layer raises on purpose."""


class InvalidNameError(StorageError, ValueError):
    def __init__(self, filename: str):
        super().__init__(f"Invalid filename: {filename!r}")
        self.filename = filename


class NotFoundError(StorageError):
    """Primary file absent and no usable backup: there is no data yet."""

    def __init__(self, filename: str):
        super().__init__(f"{filename} not found")
        self.filename = filename


class CorruptedError(StorageError):
    def __init__(self, filename: str, reason: str = "file corrupted and no valid backup available"):
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class InvalidContentError(StorageError, ValueError):
    def __init__(self, filename: str, detail: str = ""):
        msg = f"Invalid JSON data for {filename}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)
        self.filename = filename


class GuardRejectedError(StorageError):
    def __init__(self, filename: str, existing_count: int, incoming_count: int, message: Optional[str] = None):
        super().__init__(
            message
            or f"Write guard: significant data reduction detected ({existing_count} -> {incoming_count})"
        )
        self.filename = filename
        self.existing_count = existing_count
        self.incoming_count = incoming_count


class RecordNotFoundError(StorageError, LookupError):
    def __init__(self, record_id: str):
        super().__init__(f"Project not found: {record_id}")
        self.record_id = record_id


class InvalidRecordError(StorageError, ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("Invalid project data: " + "; ".join(errors))
        self.errors = list(errors)
