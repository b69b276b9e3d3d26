"""Persistence of interview and feedback records."""

from .client import PersistenceService, PersistenceRestClient

__all__ = ["PersistenceService", "PersistenceRestClient"]
