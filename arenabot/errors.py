"""Exceptions raised outside the per-tick decision core."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ArenaBotError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class SnapshotError(ArenaBotError):
    """A world snapshot dict is missing a key or carries an unknown value."""
    path: str | None = None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class ReplayError(ArenaBotError):
    pass
