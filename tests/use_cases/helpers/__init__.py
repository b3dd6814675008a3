"""Helpers for in-process use case tests."""

from .recording_transport import RecordingTransport

__all__ = ["RecordingTransport"]
