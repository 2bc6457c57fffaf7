"""Storage module for the character ledger.

Provides SQLite-based storage for:
- Character identity records
- Append-only event logs, one table per domain
"""

from dnd_ledger.storage.database import (
    DOMAIN_COLUMNS,
    Database,
    new_event_id,
)

__all__ = [
    "DOMAIN_COLUMNS",
    "Database",
    "new_event_id",
]
