"""
SQL translation index.

Backed by the ``translations`` table (see ``translatable.storage.tables``).
Writes use the database's native upsert against the unique constraint, so
concurrent writers of the same row never lose an update and need no
application-level locking.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from translatable.config import get_settings
from translatable.core.errors import IndexConflictError, StorageError
from translatable.core.models import TranslationRecord
from translatable.storage.base import TranslationIndex, query_mode
from translatable.storage.session import UNICODE_LOWER, index_session_factory
from translatable.storage.tables import TranslationTable

logger = logging.getLogger(__name__)

_UNIQUE_COLUMNS = ["translatable_type", "translatable_id", "locale", "key"]


class SqlTranslationIndex(TranslationIndex):
    """Translation index stored in a relational database."""

    def __init__(self, engine: Engine, case_sensitive: bool | None = None):
        self.engine = engine
        self._session = index_session_factory(engine)
        self.case_sensitive = (
            get_settings().search_case_sensitive if case_sensitive is None else case_sensitive
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def _upsert_statement(self, values: dict[str, Any]):
        dialect = self.engine.dialect.name

        if dialect in ("sqlite", "postgresql"):
            insert = sqlite_insert if dialect == "sqlite" else pg_insert
            stmt = insert(TranslationTable).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=_UNIQUE_COLUMNS,
                set_={"value": stmt.excluded["value"], "updated_at": func.now()},
            )

        if dialect in ("mysql", "mariadb"):
            stmt = mysql_insert(TranslationTable).values(**values)
            return stmt.on_duplicate_key_update(value=stmt.inserted["value"], updated_at=func.now())

        return None

    def upsert(self, entity_type: str, identifier: str, locale: str, key: str, value: str | None) -> None:
        values = {
            "translatable_type": entity_type,
            "translatable_id": str(identifier),
            "locale": locale,
            "key": key,
            "value": value,
        }
        stmt = self._upsert_statement(values)

        try:
            with self._session() as session, session.begin():
                if stmt is not None:
                    session.execute(stmt)
                else:
                    self._upsert_portable(session, values)
        except SQLAlchemyError as e:
            raise StorageError(
                f"Cannot upsert translation {entity_type}:{identifier} {locale}.{key}: {e}"
            ) from e

    def _upsert_portable(self, session, values: dict[str, Any]) -> None:
        """Insert, and update instead when the unique constraint fires."""
        try:
            with session.begin_nested():
                session.add(TranslationTable(**values))
        except IntegrityError:
            session.execute(
                update(TranslationTable)
                .where(*[getattr(TranslationTable, c) == values[c] for c in _UNIQUE_COLUMNS])
                .values(value=values["value"], updated_at=func.now())
            )

    def update_identifier(self, entity_type: str, old_identifier: str, new_identifier: str) -> int:
        old_identifier, new_identifier = str(old_identifier), str(new_identifier)
        if old_identifier == new_identifier:
            return 0

        stmt = (
            update(TranslationTable)
            .where(
                TranslationTable.translatable_type == entity_type,
                TranslationTable.translatable_id == old_identifier,
            )
            .values(translatable_id=new_identifier, updated_at=func.now())
        )
        try:
            with self._session() as session, session.begin():
                moved = session.execute(stmt).rowcount or 0
            logger.debug(f"Moved {moved} index row(s) {entity_type} {old_identifier} -> {new_identifier}")
            return moved
        except IntegrityError as e:
            raise IndexConflictError(
                f"Rows already exist for {entity_type} {new_identifier}; "
                f"cannot move rows from {old_identifier}"
            ) from e
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot update identifier {entity_type} {old_identifier}: {e}") from e

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, entity_type: str, identifier: str, locale: str, key: str) -> str | None:
        stmt = select(TranslationTable.value).where(
            TranslationTable.translatable_type == entity_type,
            TranslationTable.translatable_id == str(identifier),
            TranslationTable.locale == locale,
            TranslationTable.key == key,
        )
        try:
            with self._session() as session:
                return session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot read translation {entity_type}:{identifier}: {e}") from e

    def rows(self, entity_type: str, identifier: str) -> list[TranslationRecord]:
        stmt = (
            select(TranslationTable)
            .where(
                TranslationTable.translatable_type == entity_type,
                TranslationTable.translatable_id == str(identifier),
            )
            .order_by(TranslationTable.locale, TranslationTable.key)
        )
        try:
            with self._session() as session:
                return [
                    TranslationRecord(
                        translatable_type=row.translatable_type,
                        translatable_id=row.translatable_id,
                        locale=row.locale,
                        key=row.key,
                        value=row.value,
                        created_at=row.created_at,
                        updated_at=row.updated_at or row.created_at,
                    )
                    for row in session.scalars(stmt)
                ]
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot read translations of {entity_type}:{identifier}: {e}") from e

    def find_by(
        self,
        entity_type: str,
        key: str,
        *,
        value: str | None = None,
        values: Iterable[str] | None = None,
        contains: str | None = None,
        locales: Iterable[str] | None = None,
        case_sensitive: bool | None = None,
    ) -> set[str]:
        mode = query_mode(value, values, contains)
        column = TranslationTable.value
        if case_sensitive is None:
            case_sensitive = self.case_sensitive

        if mode == "values":
            pool = list(set(values))
            if not pool:
                return set()
            condition = column.in_(pool)
        elif mode == "contains":
            sqlite = self.engine.dialect.name == "sqlite"
            if not case_sensitive and sqlite:
                # Registered by create_index_engine
                folded = getattr(func, UNICODE_LOWER)(column)
                condition = func.instr(folded, contains.lower()) > 0
            elif not case_sensitive:
                condition = column.icontains(contains, autoescape=True)
            elif sqlite:
                # LIKE ignores ASCII case on SQLite
                condition = func.instr(column, contains) > 0
            else:
                condition = column.contains(contains, autoescape=True)
        else:
            condition = column == value

        stmt = (
            select(TranslationTable.translatable_id)
            .where(
                TranslationTable.translatable_type == entity_type,
                TranslationTable.key == key,
                condition,
            )
            .distinct()
        )
        if locales is not None:
            locales = list(locales)
            if not locales:
                return set()
            stmt = stmt.where(TranslationTable.locale.in_(locales))

        try:
            with self._session() as session:
                return set(session.scalars(stmt))
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot search translations of {entity_type}.{key}: {e}") from e
