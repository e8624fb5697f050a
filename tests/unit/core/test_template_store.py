"""Tests for the template store, version log and restore service."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald.common.errors import NotFoundError, RestorationFailedError, ValidationFailedError
from herald.config import ValidationSettings
from herald.core.templates.restore import RestoreService
from herald.core.templates.store import TemplateStore
from herald.core.validation.pipeline import build_pipeline
from herald.core.versions.log import VersionLog
from herald.models import MessageTemplate, OutgoingIntent, TemplateVersion
from tests.factories import GREETING_MARKUP, VALID_CONDITIONS, create_test_intent, template_fields


async def row_count(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.unit
class TestVersionLog:
    async def test_append_assigns_increasing_ids(self, versions: VersionLog) -> None:
        first = await versions.append(1, {"conditions": "", "message_markup": "<a/>"})
        second = await versions.append(2, {"conditions": "", "message_markup": "<b/>"})
        assert second.id > first.id

    async def test_find_requires_matching_subject(self, versions: VersionLog) -> None:
        snapshot = await versions.append(1, {"conditions": "", "message_markup": "<a/>"})

        assert await versions.find(1, snapshot.id) == snapshot
        assert await versions.find(2, snapshot.id) is None
        assert await versions.find(1, snapshot.id + 1) is None

    async def test_history_newest_first(self, versions: VersionLog) -> None:
        for markup in ("<a/>", "<b/>", "<c/>"):
            await versions.append(1, {"conditions": "", "message_markup": markup})
        await versions.append(2, {"conditions": "", "message_markup": "<x/>"})

        history = await versions.history(1)

        assert [v.properties["message_markup"] for v in history] == ["<c/>", "<b/>", "<a/>"]
        assert (await versions.latest(1)) == history[0]
        assert await versions.count(1) == 3


@pytest.mark.unit
class TestTemplateStore:
    async def test_worked_example(
        self, store: TemplateStore, restorer: RestoreService, intent: OutgoingIntent
    ) -> None:
        created = await store.create(
            7, {"name": "Greeting", "conditions": "always", "message_markup": GREETING_MARKUP}
        )
        assert created.id == 1
        assert created.latest_version is not None
        assert created.latest_version.id == 1

        updated = await store.update(1, {"message_markup": "<p>Hello {{name}}</p>"})
        assert updated is not None
        assert updated.name == "Greeting"
        assert updated.latest_version.id == 2
        assert updated.latest_version.properties["message_markup"] == "<p>Hello {{name}}</p>"

        restored = await restorer.restore(1, 1)
        assert restored.message_markup == GREETING_MARKUP
        assert restored.latest_version.id == 3
        assert restored.latest_version.properties["message_markup"] == GREETING_MARKUP

        fetched = await store.fetch(1)
        assert fetched.message_markup == GREETING_MARKUP
        assert fetched.latest_version.id == 3

    async def test_create_requires_existing_intent(
        self, store: TemplateStore, db_session: AsyncSession
    ) -> None:
        with pytest.raises(NotFoundError):
            await store.create(999, template_fields())

        assert await row_count(db_session, MessageTemplate) == 0
        assert await row_count(db_session, TemplateVersion) == 0

    async def test_create_validation_failure_writes_nothing(
        self, store: TemplateStore, intent: OutgoingIntent, db_session: AsyncSession
    ) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            await store.create(intent.id, template_fields(name=""))

        assert exc_info.value.field == "name"
        assert exc_info.value.message == "Message template name field is required."
        assert await row_count(db_session, MessageTemplate) == 0
        assert await row_count(db_session, TemplateVersion) == 0

    async def test_duplicate_name_rejected(
        self, store: TemplateStore, intent: OutgoingIntent, db_session: AsyncSession
    ) -> None:
        other = create_test_intent(name="intent.app.goodbye")
        db_session.add(other)
        await db_session.flush()

        await store.create(intent.id, template_fields(name="Greeting"))
        with pytest.raises(ValidationFailedError) as exc_info:
            await store.create(other.id, template_fields(name="Greeting"))

        assert exc_info.value.message == "Message template name is already in use."
        assert await row_count(db_session, MessageTemplate) == 1

    async def test_rename_onto_existing_name_rejected(
        self, store: TemplateStore, intent: OutgoingIntent
    ) -> None:
        await store.create(intent.id, template_fields(name="Greeting"))
        second = await store.create(intent.id, template_fields(name="Farewell"))

        with pytest.raises(ValidationFailedError):
            await store.update(second.id, {"name": "Greeting"})

        assert (await store.fetch(second.id)).name == "Farewell"

    async def test_update_missing_is_silent_noop(
        self, store: TemplateStore, intent: OutgoingIntent, db_session: AsyncSession
    ) -> None:
        await store.create(intent.id, template_fields())

        result = await store.update(42, {"name": "Anything"})

        assert result is None
        assert await row_count(db_session, MessageTemplate) == 1
        assert await row_count(db_session, TemplateVersion) == 1

    async def test_update_scoped_to_intent(
        self, store: TemplateStore, intent: OutgoingIntent
    ) -> None:
        created = await store.create(intent.id, template_fields())

        assert await store.update(created.id, {"name": "Moved"}, intent_id=intent.id + 1) is None
        assert (await store.fetch(created.id)).name == "Greeting"

    async def test_update_keeps_unset_fields(
        self, store: TemplateStore, intent: OutgoingIntent
    ) -> None:
        created = await store.create(intent.id, template_fields(conditions=VALID_CONDITIONS))

        updated = await store.update(created.id, {"name": "Renamed"})

        assert updated.conditions == VALID_CONDITIONS
        assert updated.message_markup == GREETING_MARKUP

    async def test_update_validation_failure_leaves_state(
        self, store: TemplateStore, intent: OutgoingIntent, versions: VersionLog
    ) -> None:
        created = await store.create(intent.id, template_fields())

        with pytest.raises(ValidationFailedError) as exc_info:
            await store.update(created.id, {"message_markup": "<p>broken"})

        assert exc_info.value.field == "message_markup"
        assert (await store.fetch(created.id)).message_markup == GREETING_MARKUP
        assert await versions.count(created.id) == 1

    async def test_each_write_adds_one_snapshot(
        self, store: TemplateStore, restorer: RestoreService, intent: OutgoingIntent, versions: VersionLog
    ) -> None:
        created = await store.create(intent.id, template_fields())
        assert await versions.count(created.id) == 1

        await store.update(created.id, {"conditions": VALID_CONDITIONS})
        assert await versions.count(created.id) == 2

        await restorer.restore(created.id, created.latest_version.id)
        assert await versions.count(created.id) == 3

    async def test_fetch_missing(self, store: TemplateStore) -> None:
        with pytest.raises(NotFoundError):
            await store.fetch(1)

    async def test_delete_keeps_history(
        self, store: TemplateStore, intent: OutgoingIntent, versions: VersionLog
    ) -> None:
        created = await store.create(intent.id, template_fields())

        await store.delete(created.id)
        await store.delete(created.id)

        with pytest.raises(NotFoundError):
            await store.fetch(created.id)
        assert await versions.find(created.id, created.latest_version.id) is not None

    async def test_deleted_id_is_not_reused(
        self, store: TemplateStore, intent: OutgoingIntent
    ) -> None:
        old = await store.create(intent.id, template_fields(name="Old"))
        await store.delete(old.id)

        new = await store.create(intent.id, template_fields(name="New"))

        assert new.id != old.id

    async def test_failed_snapshot_rolls_back_row(
        self,
        store: TemplateStore,
        intent: OutgoingIntent,
        db_session: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def failing_append(*args, **kwargs):
            raise RuntimeError("version log unavailable")

        monkeypatch.setattr(store.versions, "append", failing_append)

        with pytest.raises(RuntimeError):
            await store.create(intent.id, template_fields())

        assert await row_count(db_session, MessageTemplate) == 0
        assert await row_count(db_session, TemplateVersion) == 0

    async def test_list_pages_in_insertion_order(
        self, store: TemplateStore, intent: OutgoingIntent
    ) -> None:
        for name in ("c", "a", "b"):
            await store.create(intent.id, template_fields(name=name))

        assert [t.name for t in await store.list(intent.id, page=1, page_size=2)] == ["c", "a"]
        assert [t.name for t in await store.list(intent.id, page=2, page_size=2)] == ["b"]
        assert await store.count(intent.id) == 3
        assert await store.list(intent.id + 1) == []


@pytest.mark.unit
class TestRestoreService:
    async def test_restore_only_touches_versioned_fields(
        self, store: TemplateStore, restorer: RestoreService, intent: OutgoingIntent
    ) -> None:
        created = await store.create(intent.id, template_fields(conditions=VALID_CONDITIONS))
        await store.update(
            created.id,
            {"name": "Renamed", "conditions": "never", "message_markup": "<p>Bye</p>"},
        )

        restored = await restorer.restore(created.id, created.latest_version.id)

        assert restored.name == "Renamed"
        assert restored.intent_id == intent.id
        assert restored.conditions == VALID_CONDITIONS
        assert restored.message_markup == GREETING_MARKUP

    async def test_restore_missing_template(self, restorer: RestoreService) -> None:
        with pytest.raises(NotFoundError):
            await restorer.restore(5, 1)

    async def test_restore_missing_version(
        self, store: TemplateStore, restorer: RestoreService, intent: OutgoingIntent, versions: VersionLog
    ) -> None:
        created = await store.create(intent.id, template_fields())

        with pytest.raises(RestorationFailedError):
            await restorer.restore(created.id, 99)

        assert await versions.count(created.id) == 1

    async def test_restore_rejects_version_of_other_template(
        self, store: TemplateStore, restorer: RestoreService, intent: OutgoingIntent
    ) -> None:
        first = await store.create(intent.id, template_fields(name="First"))
        second = await store.create(intent.id, template_fields(name="Second"))

        with pytest.raises(RestorationFailedError):
            await restorer.restore(second.id, first.latest_version.id)

    async def test_restore_rejects_version_of_deleted_template(
        self, store: TemplateStore, restorer: RestoreService, intent: OutgoingIntent
    ) -> None:
        old = await store.create(intent.id, template_fields(name="Old"))
        await store.delete(old.id)
        new = await store.create(intent.id, template_fields(name="New"))

        with pytest.raises(RestorationFailedError):
            await restorer.restore(new.id, old.latest_version.id)

    async def test_restore_is_revalidated(
        self, db_session: AsyncSession, intent: OutgoingIntent
    ) -> None:
        store = TemplateStore(db_session, build_pipeline(db_session))
        created = await store.create(intent.id, template_fields(conditions=VALID_CONDITIONS))
        await store.update(created.id, {"conditions": "always"})

        # Same data, but a pipeline that no longer knows the "is_set" operation
        strict = TemplateStore(
            db_session, build_pipeline(db_session, ValidationSettings(condition_operations=["eq"]))
        )
        with pytest.raises(ValidationFailedError) as exc_info:
            await RestoreService(strict).restore(created.id, created.latest_version.id)

        assert exc_info.value.field == "conditions"
        assert (await strict.fetch(created.id)).conditions == "always"
