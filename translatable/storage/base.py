"""
Storage abstraction layer.

Translations live in two independently failing stores:

- BundleStore → one document per (entity type, identifier, locale), the
  primary store, keeps superseded values
- TranslationIndex → one row per (entity type, identifier, locale, key),
  current values only, used for search and as the read fallback

Neither store knows about the other. Keeping them in step is the job of the
writer and the identity resolver.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel

from translatable.core.models import TranslationRecord


# Superseded values are kept under "<key>_old<N>"
VERSION_SUFFIX = "_old"
_VERSION_KEY_RE = re.compile(r"^(?P<key>.+)_old(?P<n>[1-9][0-9]*)$")


def version_key(key: str, n: int) -> str:
    """Key under which the n-th superseded value of ``key`` is stored."""
    return f"{key}{VERSION_SUFFIX}{n}"


def is_version_key(key: str) -> bool:
    return bool(_VERSION_KEY_RE.match(key))


# =============================================================================
# Storage Interfaces
# =============================================================================


class BundleStore(ABC):
    """
    Per-locale translation documents.

    Local Implementation: YAML files under ``{root}/{locale}/{type}/{id}.yaml``
    """

    def check_address(self, entity_type: str, identifier: str, key: str) -> None:
        """Raise ValueError if translations can never be stored under this address."""
        if is_version_key(key):
            raise ValueError(f"'{key}' is reserved for superseded values")

    @abstractmethod
    def write(self, entity_type: str, identifier: str, locale: str, key: str, value: str) -> None:
        """Set the current value of a key, versioning any differing old value."""
        pass

    @abstractmethod
    def read(self, entity_type: str, identifier: str, locale: str, key: str) -> str | None:
        """Current value of a key, or None. Never returns superseded values."""
        pass

    @abstractmethod
    def rename(self, entity_type: str, old_identifier: str, new_identifier: str, locale: str) -> bool:
        """Move a bundle to a new identifier. Returns False if there was nothing to move."""
        pass

    @abstractmethod
    def load(self, entity_type: str, identifier: str, locale: str) -> dict[str, str]:
        """Whole document, superseded entries included. Empty if absent."""
        pass

    @abstractmethod
    def exists(self, entity_type: str, identifier: str, locale: str) -> bool:
        pass

    @abstractmethod
    def locales(self, entity_type: str) -> list[str]:
        """Locales that hold at least one bundle namespace for the entity type."""
        pass

    def history(self, entity_type: str, identifier: str, locale: str, key: str) -> list[str]:
        """Superseded values of a key, oldest first."""
        document = self.load(entity_type, identifier, locale)
        versions: list[tuple[int, str]] = []
        for name, value in document.items():
            match = _VERSION_KEY_RE.match(name)
            if match and match.group("key") == key:
                versions.append((int(match.group("n")), value))
        return [value for _, value in sorted(versions)]


class TranslationIndex(ABC):
    """
    Relational index of current translations.

    SQL Implementation: SQLAlchemy table with a unique constraint
    Local Implementation: in-memory dict
    """

    @abstractmethod
    def upsert(self, entity_type: str, identifier: str, locale: str, key: str, value: str | None) -> None:
        """Insert or update the row for (type, id, locale, key)."""
        pass

    @abstractmethod
    def get(self, entity_type: str, identifier: str, locale: str, key: str) -> str | None:
        """Value of one row, or None."""
        pass

    @abstractmethod
    def update_identifier(self, entity_type: str, old_identifier: str, new_identifier: str) -> int:
        """Move all rows of (type, old) to (type, new). Returns rows changed."""
        pass

    @abstractmethod
    def rows(self, entity_type: str, identifier: str) -> list[TranslationRecord]:
        """All rows for one entity."""
        pass

    @abstractmethod
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
        """
        Identifiers whose rows match.

        Exactly one of ``value`` (exact), ``values`` (membership) or
        ``contains`` (substring) must be given. ``case_sensitive`` only
        applies to substring matching.
        """
        pass


def query_mode(value: str | None, values: Iterable[str] | None, contains: str | None) -> str:
    """Validate a ``find_by`` call and name its mode."""
    given = [name for name, arg in (("value", value), ("values", values), ("contains", contains)) if arg is not None]
    if len(given) != 1:
        raise ValueError(f"find_by needs exactly one of value, values, contains (got {given or 'none'})")
    return given[0]


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for both stores.

    Initialize once at startup with the appropriate implementations and
    hand it to the engine.
    """

    model_config = {"arbitrary_types_allowed": True}

    bundles: BundleStore
    index: TranslationIndex
