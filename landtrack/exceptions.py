"""Custom exceptions for LandTrack.

Expected "not found" outcomes in the record store are reported through
``None``/``False`` returns. The classes below cover the conditions that are
genuinely exceptional.
"""

from __future__ import annotations

from typing import Optional


class LandtrackError(Exception):
    """Base exception for all LandTrack errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """Initialise with a human-readable message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(LandtrackError):
    """Raised when an operation needs a record that does not exist."""

    def __init__(self, kind: str, record_id: Optional[str]):
        super().__init__(
            f"{kind} {record_id} not found",
            details={"kind": kind, "id": record_id},
        )
        self.kind = kind
        self.record_id = record_id


class StorageCorrupt(LandtrackError):
    """Raised when a persisted slot cannot be decoded into records.

    Attributes:
        slot: Name of the slot that failed to load (e.g. ``"expenses"``)
        reason: Short description of what was wrong with the payload
    """

    def __init__(self, slot: str, reason: str):
        super().__init__(
            f"Persisted slot '{slot}' is corrupt: {reason}",
            details={"slot": slot, "reason": reason},
        )
        self.slot = slot
        self.reason = reason


class StoreClosed(LandtrackError):
    """Raised when the record store is used before ``open`` or after ``close``."""
