"""Assignment rule engine and bulk generation adapter."""

from .bulk import BulkGenerationAdapter, GenerationRequest, Generator, Proposal
from .rules import AssignmentEngine, EngineContext, shared_secret_authorizer

__all__ = [
    "AssignmentEngine",
    "EngineContext",
    "shared_secret_authorizer",
    "BulkGenerationAdapter",
    "GenerationRequest",
    "Generator",
    "Proposal",
]
