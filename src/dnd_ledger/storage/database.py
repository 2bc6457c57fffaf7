"""SQLite event store for character ledgers.

Provides persistent storage for:
- Character identity records
- One append-only event table per domain

Rows are only ever inserted; nothing here updates or deletes an event.
Reads hand rows to ``parse_events`` so that callers only ever see
validated, ordered event records.
"""

from __future__ import annotations

import itertools
import sqlite3
import time
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from dnd_ledger.core.config import get_settings
from dnd_ledger.core.exceptions import StorageError
from dnd_ledger.core.logging import get_logger
from dnd_ledger.models.enums import EventDomain
from dnd_ledger.models.events import (
    CharacterHistory,
    CharacterRecord,
    LedgerEvent,
    parse_character,
    parse_events,
)

logger = get_logger(__name__)


# =============================================================================
# Table Layout
# =============================================================================

# Domain-specific columns; every event table also has id, character_id,
# created_at and note.
DOMAIN_COLUMNS: dict[EventDomain, tuple[str, ...]] = {
    EventDomain.ABILITIES: ("ability", "score", "proficient"),
    EventDomain.SKILLS: ("skill", "proficiency"),
    EventDomain.COINS: ("pp", "gp", "ep", "sp", "cp"),
    EventDomain.HIT_POINTS: ("delta",),
    EventDomain.HIT_DICE: ("die", "action"),
    EventDomain.SPELL_SLOTS: ("slot_level", "action"),
    EventDomain.ITEMS: ("item_id", "worn", "wielded", "dropped_at"),
    EventDomain.ITEM_CHARGES: ("item_id", "delta"),
    EventDomain.SPELLBOOK: ("spell_id", "action"),
    EventDomain.PREPARED_SPELLS: ("class_name", "spell_id", "action", "always_prepared"),
    EventDomain.CLASS_LEVELS: ("class_name", "level", "subclass", "hit_die_roll"),
    EventDomain.TRAITS: ("name", "description", "source", "source_detail", "level"),
    EventDomain.NOTES: ("content",),
}

# Charge records belong to an item, not to a character; the owner is
# stored for lookup only and is not part of the record.
_OWNER_IN_RECORD: dict[EventDomain, bool] = {
    domain: domain is not EventDomain.ITEM_CHARGES for domain in EventDomain
}

_event_counter = itertools.count()
_last_ns = 0


def new_event_id() -> str:
    """Generate an event id that sorts after every id generated before it.

    Ids are zero-padded nanosecond timestamps plus a process-wide
    counter, so lexicographic order follows creation order.
    """
    global _last_ns
    _last_ns = max(time.time_ns(), _last_ns)
    return f"{_last_ns:020d}-{next(_event_counter) % 1_000_000:06d}"


def _to_column(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


# =============================================================================
# Database Class
# =============================================================================


class Database:
    """SQLite database holding character records and event logs.

    Implements the read side the composer needs (``get_character`` and
    ``fetch_history``) plus the append operations used to record play.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize database.

        Args:
            db_path: Path to database file. If None, uses the configured
                storage path.
        """
        if db_path is None:
            self.db_path = self._get_default_path()
        else:
            self.db_path = Path(db_path)

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info("Database initialized", path=str(self.db_path))

    @staticmethod
    def _get_default_path() -> Path:
        """Get the database path from settings."""
        return get_settings().storage.database_path

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup.

        Raises:
            StorageError: If SQLite fails while the connection is in use.
        """
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as exc:
            raise StorageError(
                f"Cannot open event store: {exc}",
                details={"path": str(self.db_path)},
            ) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(
                f"Event store operation failed: {exc}",
                details={"path": str(self.db_path)},
            ) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS characters (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    ruleset TEXT,
                    species TEXT,
                    lineage TEXT,
                    background TEXT,
                    alignment TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            for domain, columns in DOMAIN_COLUMNS.items():
                extra = ",\n".join(columns)
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {domain.value} (
                        id TEXT PRIMARY KEY,
                        character_id TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        note TEXT,
                        {extra}
                    )
                """)
                cursor.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_{domain.value}_character
                    ON {domain.value}(character_id, created_at, id)
                """)

            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    # =========================================================================
    # Character Operations
    # =========================================================================

    def add_character(
        self,
        name: str,
        *,
        character_id: str | None = None,
        ruleset: str | None = None,
        species: str | None = None,
        lineage: str | None = None,
        background: str | None = None,
        alignment: str | None = None,
    ) -> CharacterRecord:
        """Add a character identity record.

        Args:
            name: Character name.
            character_id: Identity to use; generated if None.
            ruleset: Ruleset name ('srd51' or 'srd52'), or None for the
                configured default.
            species: Species name.
            lineage: Species lineage.
            background: Background name.
            alignment: Alignment.

        Returns:
            The created record.
        """
        record = CharacterRecord(
            id=character_id or str(uuid4()),
            name=name,
            ruleset=ruleset,
            species=species,
            lineage=lineage,
            background=background,
            alignment=alignment,
            created_at=datetime.now(UTC),
        )

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO characters
                (id, name, ruleset, species, lineage, background, alignment, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (record.id, record.name, record.ruleset, record.species, record.lineage,
                  record.background, record.alignment, _to_column(record.created_at)))

        logger.info("Added character", character_id=record.id, name=name)
        return record

    def get_character(self, character_id: str) -> CharacterRecord | None:
        """Get a character record by id.

        Args:
            character_id: The character identity.

        Returns:
            The record if found, None otherwise.

        Raises:
            MalformedEventError: If the stored row fails validation.
        """
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT id, name, ruleset, species, lineage, background, alignment, created_at
                FROM characters WHERE id = ?
            """, (character_id,)).fetchone()

        if row is None:
            return None
        return parse_character(dict(row))

    def list_characters(self) -> list[CharacterRecord]:
        """Get every character record, oldest first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT id, name, ruleset, species, lineage, background, alignment, created_at
                FROM characters ORDER BY created_at, id
            """).fetchall()
        return [parse_character(dict(row)) for row in rows]

    # =========================================================================
    # Event Operations
    # =========================================================================

    def append(
        self,
        domain: EventDomain,
        character_id: str,
        *,
        created_at: datetime | None = None,
        note: str | None = None,
        **fields: Any,
    ) -> LedgerEvent:
        """Append one event to a domain log.

        The event is validated before it is written, so a log never holds
        a row its own reader would reject.

        Args:
            domain: The log to append to.
            character_id: Owning character.
            created_at: Creation time; defaults to now (UTC).
            note: Optional free-text note.
            **fields: Domain-specific fields.

        Returns:
            The validated event as stored.

        Raises:
            MalformedEventError: If the fields do not form a valid event.
            StorageError: If the write fails.
        """
        unknown = set(fields) - set(DOMAIN_COLUMNS[domain])
        if unknown:
            raise StorageError(
                f"Unknown fields for {domain.value}: {', '.join(sorted(unknown))}",
                details={"domain": domain.value},
            )

        row: dict[str, Any] = {
            "id": new_event_id(),
            "created_at": created_at or datetime.now(UTC),
            "note": note,
            **fields,
        }
        if _OWNER_IN_RECORD[domain]:
            row["character_id"] = character_id
        event = parse_events(domain, [row])[0]

        stored = event.model_dump()
        stored["character_id"] = character_id
        columns = ["id", "character_id", "created_at", "note", *DOMAIN_COLUMNS[domain]]
        placeholders = ", ".join("?" for _ in columns)

        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO {domain.value} ({', '.join(columns)}) VALUES ({placeholders})",
                tuple(_to_column(stored.get(column)) for column in columns),
            )

        logger.debug(
            "Appended event",
            domain=domain.value,
            character_id=character_id,
            event_id=event.id,
        )
        return event

    def fetch_events(self, domain: EventDomain, character_id: str) -> list[LedgerEvent]:
        """Get the validated log of one domain for a character.

        Args:
            domain: The log to read.
            character_id: Owning character.

        Returns:
            Events ordered by creation time, then id.

        Raises:
            MalformedEventError: If a stored row fails validation.
        """
        columns = ["id", "created_at", "note", *DOMAIN_COLUMNS[domain]]
        if _OWNER_IN_RECORD[domain]:
            columns.append("character_id")

        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT {', '.join(columns)} FROM {domain.value} "
                "WHERE character_id = ? ORDER BY created_at, id",
                (character_id,),
            ).fetchall()

        # NULL columns fall back to the record defaults.
        return parse_events(
            domain,
            [{key: row[key] for key in row.keys() if row[key] is not None} for row in rows],
        )

    def fetch_history(self, character_id: str) -> CharacterHistory:
        """Get every event log of a character.

        Args:
            character_id: Owning character.

        Returns:
            The character's full history.
        """
        return CharacterHistory.from_domains(
            {domain: self.fetch_events(domain, character_id) for domain in EventDomain}
        )


__all__ = [
    "DOMAIN_COLUMNS",
    "new_event_id",
    "Database",
]
