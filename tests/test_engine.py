"""
Tests for the host integration surface.

Core principle: a new entity's translations end up under its final key, and
every read finds them there.
"""

import pytest

from translatable.core.errors import PartialWriteError, ReconciliationError, StorageError
from translatable.core.locale import LocaleContext
from translatable.engine import Translatable, TranslationEngine, get_engine, set_engine
from translatable.services.identity import PROVISIONAL_ATTR


class Post(Translatable):
    translatable = ["title", "body"]

    def __init__(self, title=None, body=None, id=None):
        self.id = id
        self.title = title
        self.body = body
        self.slug = "post"


# =============================================================================
# End-to-end scenario
# =============================================================================


class TestNewEntityLifecycle:
    def test_post_scenario(self, engine, storage):
        post = Post(title={"en": "Hello", "tr": "Merhaba"})

        report = engine.before_persist(post)
        provisional = report.identifier
        assert report.provisional
        assert post.title == provisional
        assert storage.bundles.load("Post", provisional, "en") == {"title": "Hello"}
        assert storage.bundles.load("Post", provisional, "tr") == {"title": "Merhaba"}
        assert {(r.locale, r.value) for r in storage.index.rows("Post", provisional)} == {
            ("en", "Hello"),
            ("tr", "Merhaba"),
        }

        post.id = 42
        reconciled = engine.after_persist(post, was_newly_created=True)
        assert reconciled.renamed == ["en", "tr"]
        assert reconciled.rows_updated == 2
        assert post.title == "42"
        assert not hasattr(post, PROVISIONAL_ATTR)
        assert not storage.bundles.exists("Post", provisional, "en")
        assert storage.index.rows("Post", provisional) == []
        assert {r.translatable_id for r in storage.index.rows("Post", "42")} == {"42"}

        assert engine.resolve("Post", "42", "title", "tr") == "Merhaba"

        post.title = {"en": "Hi"}
        engine.before_persist(post)
        document = storage.bundles.load("Post", "42", "en")
        assert document == {"title": "Hi", "title_old1": "Hello"}
        assert list(document) == ["title", "title_old1"]
        assert storage.index.get("Post", "42", "en", "title") == "Hi"

    def test_persisted_entity_writes_under_its_key(self, engine, storage):
        post = Post(title={"en": "Hello"}, id=7)

        report = engine.before_persist(post)

        assert not report.provisional
        assert post.title == "7"
        assert storage.bundles.read("Post", "7", "en", "title") == "Hello"
        assert engine.after_persist(post, was_newly_created=False) is None

    def test_resave_with_reference_is_skipped(self, engine, storage):
        post = Post(title={"en": "Hello"}, id=7)
        engine.before_persist(post)

        report = engine.before_persist(post)

        assert report.skipped == ["title", "body"]
        assert storage.bundles.history("Post", "7", "en", "title") == []

    def test_plain_attributes_are_left_alone(self, engine):
        post = Post(title="Just text", body={"en": "Body"})

        report = engine.before_persist(post)

        assert post.title == "Just text"
        assert post.body == report.identifier
        assert report.skipped == ["title"]

    def test_json_text_attribute(self, engine, storage):
        post = Post(title='{"en": "Hello", "de": "Hallo"}', id=3)

        engine.before_persist(post)

        assert storage.bundles.read("Post", "3", "de", "title") == "Hallo"

    def test_after_persist_twice_is_safe(self, engine, storage):
        post = Post(title={"en": "Hello"})
        engine.before_persist(post)
        post.id = 42
        engine.after_persist(post)

        assert engine.after_persist(post) is None
        assert engine.resolve("Post", "42", "title", "en") == "Hello"

    def test_reconcile_twice_directly(self, engine, storage):
        post = Post(title={"en": "Hello", "tr": "Merhaba"})
        provisional = engine.before_persist(post).identifier

        engine.reconcile("Post", provisional, "42")
        again = engine.reconcile("Post", provisional, "42")

        assert again.is_noop
        assert len(storage.index.rows("Post", "42")) == 2


# =============================================================================
# Failures
# =============================================================================


class TestWriteFailures:
    def test_failed_locale_is_reported_and_others_written(self, engine, storage, monkeypatch):
        write = storage.bundles.write

        def flaky_write(entity_type, identifier, locale, key, value):
            if locale == "tr":
                raise StorageError("disk full")
            return write(entity_type, identifier, locale, key, value)

        monkeypatch.setattr(storage.bundles, "write", flaky_write)
        post = Post(title={"en": "Hello", "tr": "Merhaba"}, id=5)

        with pytest.raises(PartialWriteError) as exc_info:
            engine.before_persist(post)

        report = exc_info.value.report
        assert [(f.attribute, f.locale, f.store) for f in report.failures] == [("title", "tr", "bundle")]
        assert report.get("title").written == ["en"]
        # Raw value kept so the caller can retry
        assert post.title == {"en": "Hello", "tr": "Merhaba"}
        assert storage.bundles.read("Post", "5", "en", "title") == "Hello"
        # The index still has the locale the bundle missed
        assert engine.resolve("Post", "5", "title", "tr") == "Merhaba"

    def test_failed_attribute_does_not_block_others(self, engine, storage, monkeypatch):
        upsert = storage.index.upsert

        def flaky_upsert(entity_type, identifier, locale, key, value):
            if key == "body":
                raise StorageError("table locked")
            return upsert(entity_type, identifier, locale, key, value)

        monkeypatch.setattr(storage.index, "upsert", flaky_upsert)
        post = Post(title={"en": "Hello"}, body={"en": "Body"}, id=5)

        with pytest.raises(PartialWriteError):
            engine.before_persist(post)

        assert post.title == "5"
        assert post.body == {"en": "Body"}

    def test_unstorable_identifier_writes_nothing(self, engine, storage):
        post = Post(title={"en": "Hello"}, body={"en": "Body"}, id="a/b")

        with pytest.raises(ValueError):
            engine.before_persist(post)

        assert post.title == {"en": "Hello"}
        assert storage.index.rows("Post", "a/b") == []

    def test_reserved_attribute_name_writes_nothing(self, engine, storage):
        class Legacy(Translatable):
            translatable = ["title", "title_old1"]

            def __init__(self):
                self.id = 7
                self.title = {"en": "Hello"}
                self.title_old1 = {"en": "Older"}

        entity = Legacy()

        with pytest.raises(ValueError):
            engine.before_persist(entity)

        assert entity.title == {"en": "Hello"}
        assert not storage.bundles.exists("Legacy", "7", "en")
        assert storage.index.rows("Legacy", "7") == []

    def test_transient_reconcile_failure_is_retried(self, engine, storage, monkeypatch):
        update_identifier = storage.index.update_identifier
        calls = []

        def flaky_update(*args):
            calls.append(args)
            if len(calls) == 1:
                raise StorageError("connection reset")
            return update_identifier(*args)

        monkeypatch.setattr(storage.index, "update_identifier", flaky_update)
        post = Post(title={"en": "Hello"})
        engine.before_persist(post)
        post.id = 42

        report = engine.after_persist(post)

        assert len(calls) == 2
        assert report.rows_updated == 1
        # The bundle moved on the first attempt
        assert report.renamed == ["en"]
        assert report.missing == []
        assert engine.resolve("Post", "42", "title", "en") == "Hello"

    def test_conflict_is_not_retried_and_keeps_provisional(self, engine, storage, monkeypatch):
        post = Post(title={"en": "Hello"})
        provisional = engine.before_persist(post).identifier
        storage.bundles.write("Post", "42", "en", "title", "Someone else")
        post.id = 42

        calls = []
        reconcile = engine.identity.reconcile
        monkeypatch.setattr(
            engine.identity, "reconcile", lambda *a, **kw: calls.append(a) or reconcile(*a, **kw)
        )

        with pytest.raises(ReconciliationError) as exc_info:
            engine.after_persist(post)

        assert len(calls) == 1
        assert exc_info.value.report.conflicts == ["en"]
        assert getattr(post, PROVISIONAL_ATTR) == provisional
        assert post.title == provisional


# =============================================================================
# Reads
# =============================================================================


class TestGetAttribute:
    def test_requested_locale(self, engine):
        post = Post(title={"en": "Hello", "tr": "Merhaba"}, id=1)
        engine.before_persist(post)

        assert engine.get_attribute(post, "title", "tr") == "Merhaba"
        assert engine.get_attribute(post, "title") == "Hello"

    def test_fallback_locale(self, engine):
        post = Post(title={"en": "Hello"}, id=1)
        engine.before_persist(post)

        assert engine.get_attribute(post, "title", "de") == "Hello"

    def test_raw_value_when_nothing_found(self, engine):
        post = Post(title="Plain", id=1)
        engine.before_persist(post)

        assert engine.get_attribute(post, "title", "tr") == "Plain"

    def test_non_translatable_attribute(self, engine):
        post = Post(id=1)

        assert engine.get_attribute(post, "slug") == "post"

    def test_reads_before_reconciliation_use_provisional_id(self, engine):
        post = Post(title={"tr": "Merhaba"})
        engine.before_persist(post)

        assert engine.get_attribute(post, "title", "tr") == "Merhaba"

    def test_mixin_accessor_uses_global_engine(self, engine):
        set_engine(engine)
        try:
            post = Post(title={"en": "Hello"}, id=9)
            engine.before_persist(post)

            assert get_engine() is engine
            assert post.get_translation("title") == "Hello"
        finally:
            set_engine(None)

    def test_entity_type_override(self, engine, storage):
        class Draft(Post):
            translatable_type = "Post"

        draft = Draft(title={"en": "Hello"}, id=11)
        engine.before_persist(draft)

        assert storage.bundles.read("Post", "11", "en", "title") == "Hello"


class TestEngineContext:
    def test_context_from_settings(self, storage, settings):
        engine = TranslationEngine(storage, settings=settings)

        assert engine.context == LocaleContext(active="en", fallback="en")
