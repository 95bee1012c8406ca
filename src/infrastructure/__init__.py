"""Infrastructure layer implementations."""

from src.infrastructure import events, storage

__all__ = ["storage", "events"]
