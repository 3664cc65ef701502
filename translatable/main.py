"""
Translatable - main entry point.

Runs the write → persist → reconcile → read cycle against a temporary
bundle directory and SQLite index, to verify an installation.

    python -m translatable.main
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from translatable.core.locale import LocaleContext
from translatable.engine import Translatable, TranslationEngine
from translatable.storage import LocalBundleStore, SqlTranslationIndex, StorageProvider
from translatable.storage.session import create_index_engine
from translatable.storage.tables import create_schema


class Post(Translatable):
    translatable = ["title"]

    def __init__(self, title):
        self.id = None
        self.title = title


def demo(workdir: Path) -> None:
    """Translate a new post, give it a key, and read it back."""
    print("=" * 60)
    print("TRANSLATABLE DEMO")
    print("=" * 60)
    print()

    db = create_index_engine(f"sqlite:///{workdir / 'translations.db'}")
    create_schema(db)
    storage = StorageProvider(
        bundles=LocalBundleStore(workdir / "lang"),
        index=SqlTranslationIndex(db),
    )
    engine = TranslationEngine(storage, context=LocaleContext(active="en", fallback="en"))

    post = Post({"en": "Hello", "tr": "Merhaba"})
    report = engine.before_persist(post)
    print(f"Wrote {report.entity_type} under provisional id {report.identifier}")
    for result in report.attributes:
        print(f"  ✓ {result.attribute}: {', '.join(result.written)}")
    print()

    # The host stores the post and assigns its key
    post.id = 42
    reconciled = engine.after_persist(post, was_newly_created=True)
    print(f"Reconciled to {reconciled.new_identifier}: "
          f"{len(reconciled.renamed)} bundle(s), {reconciled.rows_updated} row(s)")
    print()

    print(f"title[tr] = {engine.get_attribute(post, 'title', 'tr')}")
    print(f"title[de] = {engine.get_attribute(post, 'title', 'de')}  (fallback)")

    post.title = {"en": "Hi"}
    engine.before_persist(post)
    print(f"en bundle after update: {storage.bundles.load('Post', '42', 'en')}")
    print(f"search 'merh': {engine.search.contains('Post', 'title', 'merh')}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    with tempfile.TemporaryDirectory() as tmp:
        demo(Path(tmp))


if __name__ == "__main__":
    main()
