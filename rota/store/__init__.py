"""Entity store and persistence collaborators."""

from .backend import PersistenceBackend, SqlAlchemyBackend
from .entity_store import COLLECTIONS, EntityStore, Mutation, MutationState

__all__ = [
    "COLLECTIONS",
    "EntityStore",
    "Mutation",
    "MutationState",
    "PersistenceBackend",
    "SqlAlchemyBackend",
]
