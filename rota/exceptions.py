"""Exceptions raised across the rota package."""

from __future__ import annotations


class PersistenceError(RuntimeError):
    """A call to the persistence collaborator failed."""


class GenerationError(RuntimeError):
    """Bulk generation failed or its batch could not be confirmed."""
