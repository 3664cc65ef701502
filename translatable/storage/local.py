"""
Local storage implementations.

The bundle store keeps YAML documents on the local filesystem; the
in-memory index is for development and tests and needs no database.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from collections.abc import Iterable
from contextlib import ExitStack
from pathlib import Path
from typing import Any

import yaml

from translatable.config import get_settings
from translatable.core.errors import (
    BundleConflictError,
    BundleCorruptError,
    IndexConflictError,
    StorageError,
)
from translatable.core.models import TranslationRecord
from translatable.core.utils import utc_now
from translatable.storage.base import (
    BundleStore,
    TranslationIndex,
    is_version_key,
    query_mode,
    version_key,
)

logger = logging.getLogger(__name__)

# Size of the lock pool shared by all documents of a store
LOCK_STRIPES = 64


def _check_segment(value: str, what: str) -> str:
    """Reject values that would escape their directory."""
    if not value or value in (".", "..") or any(c in value for c in ("/", "\\", "\0")):
        raise ValueError(f"Invalid {what} for a bundle path: {value!r}")
    return value


# =============================================================================
# Local Filesystem Bundle Store
# =============================================================================


class LocalBundleStore(BundleStore):
    """
    Store translation bundles as YAML files.

    Every write rewrites the whole document through a temp file and
    ``os.replace``, so readers only ever see complete documents. Writers of
    the same document are serialized by the lock of the document's stripe,
    one of a fixed pool indexed by the path hash.
    """

    def __init__(
        self,
        base_path: str | Path | None = None,
        extension: str | None = None,
        rename_conflict: str | None = None,
    ):
        settings = get_settings()
        self.base_path = Path(base_path if base_path is not None else settings.bundle_path)
        self.extension = (extension or settings.bundle_extension).lstrip(".")
        self.rename_conflict = rename_conflict or settings.rename_conflict
        if self.rename_conflict not in ("reject", "overwrite"):
            raise ValueError(f"Unknown rename_conflict policy: {self.rename_conflict!r}")

        self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

    # =========================================================================
    # Paths and locks
    # =========================================================================

    def path_for(self, entity_type: str, identifier: str, locale: str) -> Path:
        return (
            self.base_path
            / _check_segment(locale, "locale")
            / _check_segment(entity_type, "entity type")
            / f"{_check_segment(str(identifier), 'identifier')}.{self.extension}"
        )

    def _locks_for(self, *paths: Path) -> list[threading.Lock]:
        """Locks guarding the given documents, in acquisition order."""
        stripes = sorted({hash(path) % len(self._locks) for path in paths})
        return [self._locks[i] for i in stripes]

    # =========================================================================
    # Document I/O
    # =========================================================================

    def _load(self, path: Path, strict: bool) -> dict[str, str]:
        try:
            if not path.exists():
                return {}
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read bundle {path}: {e}") from e

        try:
            data: Any = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            if strict:
                raise BundleCorruptError(f"Bundle {path} is not valid YAML: {e}") from e
            logger.warning(f"Ignoring unparsable bundle {path}: {e}")
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            if strict:
                raise BundleCorruptError(f"Bundle {path} is not a key/value document")
            logger.warning(f"Ignoring unreadable bundle {path}")
            return {}

        return {str(k): v if isinstance(v, str) else str(v) for k, v in data.items() if v is not None}

    def _dump(self, path: Path, document: dict[str, str]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        except OSError as e:
            raise StorageError(f"Cannot write bundle {path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(document, f, sort_keys=False, allow_unicode=True, default_flow_style=False)
            os.replace(tmp_path, path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise StorageError(f"Cannot write bundle {path}: {e}") from e

    # =========================================================================
    # BundleStore
    # =========================================================================

    def check_address(self, entity_type: str, identifier: str, key: str) -> None:
        super().check_address(entity_type, identifier, key)
        _check_segment(entity_type, "entity type")
        _check_segment(str(identifier), "identifier")

    def write(self, entity_type: str, identifier: str, locale: str, key: str, value: str) -> None:
        self.check_address(entity_type, identifier, key)
        path = self.path_for(entity_type, identifier, locale)
        (lock,) = self._locks_for(path)
        with lock:
            document = self._load(path, strict=True)
            current = document.get(key)
            if current == value:
                return

            if current is not None:
                n = 1
                while version_key(key, n) in document:
                    n += 1
                document[version_key(key, n)] = current
                logger.debug(f"Superseded {entity_type}/{identifier}[{locale}].{key} as {version_key(key, n)}")

            document[key] = value
            self._dump(path, document)

    def read(self, entity_type: str, identifier: str, locale: str, key: str) -> str | None:
        if is_version_key(key):
            return None
        path = self.path_for(entity_type, identifier, locale)
        return self._load(path, strict=False).get(key)

    def rename(self, entity_type: str, old_identifier: str, new_identifier: str, locale: str) -> bool:
        source = self.path_for(entity_type, old_identifier, locale)
        target = self.path_for(entity_type, new_identifier, locale)
        if source == target:
            return False

        with ExitStack() as stack:
            for lock in self._locks_for(source, target):
                stack.enter_context(lock)
            if not source.exists():
                return False
            if target.exists():
                if self.rename_conflict == "reject":
                    raise BundleConflictError(
                        f"Cannot rename {source} to {target}: destination exists"
                    )
                logger.warning(f"Overwriting existing bundle {target} with {source}")
            try:
                os.replace(source, target)
            except OSError as e:
                raise StorageError(f"Cannot rename bundle {source}: {e}") from e
        return True

    def load(self, entity_type: str, identifier: str, locale: str) -> dict[str, str]:
        return self._load(self.path_for(entity_type, identifier, locale), strict=False)

    def exists(self, entity_type: str, identifier: str, locale: str) -> bool:
        return self.path_for(entity_type, identifier, locale).exists()

    def locales(self, entity_type: str) -> list[str]:
        _check_segment(entity_type, "entity type")
        if not self.base_path.is_dir():
            return []
        try:
            return sorted(
                d.name for d in self.base_path.iterdir()
                if d.is_dir() and (d / entity_type).is_dir()
            )
        except OSError as e:
            raise StorageError(f"Cannot list bundle locales in {self.base_path}: {e}") from e


# =============================================================================
# In-Memory Translation Index
# =============================================================================


class InMemoryTranslationIndex(TranslationIndex):
    """In-memory translation index for development."""

    def __init__(self, case_sensitive: bool | None = None):
        self._rows: dict[tuple[str, str, str, str], TranslationRecord] = {}
        self._lock = threading.Lock()
        self.case_sensitive = (
            get_settings().search_case_sensitive if case_sensitive is None else case_sensitive
        )

    def upsert(self, entity_type: str, identifier: str, locale: str, key: str, value: str | None) -> None:
        unique = (entity_type, str(identifier), locale, key)
        with self._lock:
            row = self._rows.get(unique)
            if row is None:
                self._rows[unique] = TranslationRecord(
                    translatable_type=entity_type,
                    translatable_id=str(identifier),
                    locale=locale,
                    key=key,
                    value=value,
                )
            else:
                row.value = value
                row.updated_at = utc_now()

    def get(self, entity_type: str, identifier: str, locale: str, key: str) -> str | None:
        row = self._rows.get((entity_type, str(identifier), locale, key))
        return row.value if row else None

    def update_identifier(self, entity_type: str, old_identifier: str, new_identifier: str) -> int:
        old_identifier, new_identifier = str(old_identifier), str(new_identifier)
        if old_identifier == new_identifier:
            return 0

        with self._lock:
            moving = [k for k in self._rows if k[0] == entity_type and k[1] == old_identifier]
            clashes = [k for k in moving if (entity_type, new_identifier, k[2], k[3]) in self._rows]
            if clashes:
                raise IndexConflictError(
                    f"{len(clashes)} row(s) already exist for {entity_type} {new_identifier}"
                )

            now = utc_now()
            for unique in moving:
                row = self._rows.pop(unique)
                row.translatable_id = new_identifier
                row.updated_at = now
                self._rows[row.unique_key] = row
            return len(moving)

    def rows(self, entity_type: str, identifier: str) -> list[TranslationRecord]:
        return [
            row.model_copy() for k, row in sorted(self._rows.items())
            if k[0] == entity_type and k[1] == str(identifier)
        ]

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
        wanted_locales = set(locales) if locales is not None else None
        if case_sensitive is None:
            case_sensitive = self.case_sensitive

        if mode == "values":
            pool = set(values)
            match = lambda v: v in pool
        elif mode == "contains":
            if case_sensitive:
                match = lambda v: contains in v
            else:
                needle = contains.lower()
                match = lambda v: needle in v.lower()
        else:
            match = lambda v: v == value

        with self._lock:
            rows = list(self._rows.values())

        return {
            row.translatable_id for row in rows
            if row.translatable_type == entity_type
            and row.key == key
            and row.value is not None
            and (wanted_locales is None or row.locale in wanted_locales)
            and match(row.value)
        }
