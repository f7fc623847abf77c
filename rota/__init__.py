"""Rota package for staff scheduling across locations.

Modules:
- config: load and validate configuration (JSON or YAML)
- domain: entities, SQLAlchemy tables, repositories and seed data
- store: in-memory entity store with optimistic remote synchronisation
- engine: assignment rules and bulk generation adapter
- services: calendar ranges, hours aggregation, range reports
- io: CSV import/export helpers
- ai: CP-SAT planner used as the bulk generation collaborator
- session_state: persisted privilege flag
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "store",
    "engine",
    "services",
    "io",
    "ai",
    "session_state",
    "cli",
]
