"""Unit tests for the translation cascade coordinator."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from newsroom.errors import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from newsroom.models import AuditLog, ContentStage, Notification, StaffRole
from newsroom.services.cascade_service import (
    PublishCascadeMode,
    TranslationRequest,
    auto_advance_parent,
    create_translations,
    get_publish_cascade_mode,
    publish_translations,
    translation_summary,
)
from tests.factories.content_factory import (
    UserFactory,
    make_actor,
    make_ready_item,
    make_translation,
)

REPO = "newsroom.services.cascade_service.repo"


def _added(db_session, kind):
    return [c.args[0] for c in db_session.add.call_args_list if isinstance(c.args[0], kind)]


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------


@pytest.fixture
def fan_out_parent(taxonomy):
    return make_ready_item(
        taxonomy,
        stage=ContentStage.approved,
        slug="budget-speech",
        title="Budget speech",
        classifications=[taxonomy.english, taxonomy.christian, taxonomy.western_cape],
    )


@pytest.fixture
def languages(taxonomy):
    by_name = {"afrikaans": taxonomy.afrikaans, "xhosa": taxonomy.xhosa}

    async def _lookup(db, language):
        return by_name.get(language.lower())

    return _lookup


class TestCreateTranslations:
    @pytest.mark.asyncio
    async def test_creates_one_draft_per_language(
        self, db_session, taxonomy, fan_out_parent, languages
    ):
        actor = make_actor(StaffRole.sub_editor)
        af_translator = UserFactory.create(role=StaffRole.journalist)
        xh_translator = UserFactory.create(role=StaffRole.editor)
        users = {af_translator.id: af_translator, xh_translator.id: xh_translator}

        with patch(f"{REPO}.get_item", AsyncMock(return_value=fan_out_parent)), \
             patch(f"{REPO}.list_translations", AsyncMock(return_value=[])), \
             patch(f"{REPO}.get_active_language", AsyncMock(side_effect=languages)), \
             patch(f"{REPO}.get_user", AsyncMock(side_effect=lambda db, uid: users[uid])):
            created = await create_translations(
                db_session,
                actor,
                fan_out_parent.id,
                [
                    TranslationRequest("Afrikaans", af_translator.id),
                    TranslationRequest("xhosa", xh_translator.id),
                ],
            )

        assert [t.language for t in created] == ["afrikaans", "xhosa"]
        first = created[0]
        assert first.stage == ContentStage.draft.value
        assert first.is_translation is True
        assert first.original_item_id == fan_out_parent.id
        assert first.author_id == af_translator.id
        assert first.title == "Budget speech"
        assert first.body == ""
        assert first.slug == "budget-speech-afrikaans"
        assert first.category_id == fan_out_parent.category_id
        assert {link.classification_id for link in first.classifications} == {
            taxonomy.christian.id,
            taxonomy.western_cape.id,
            taxonomy.afrikaans.id,
        }

        audits = _added(db_session, AuditLog)
        assert [a.action for a in audits] == ["CREATE_TRANSLATION", "CREATE_TRANSLATION"]
        notifications = _added(db_session, Notification)
        assert {n.user_id for n in notifications} == {af_translator.id, xh_translator.id}
        db_session.flush.assert_awaited()

    @pytest.mark.asyncio
    async def test_requires_approver_tier(self, db_session):
        actor = make_actor(StaffRole.journalist)
        with pytest.raises(ForbiddenError):
            await create_translations(
                db_session, actor, uuid4(), [TranslationRequest("afrikaans", uuid4())]
            )
        db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_request(self, db_session):
        with pytest.raises(ValidationError):
            await create_translations(db_session, make_actor(), uuid4(), [])

    @pytest.mark.asyncio
    async def test_duplicate_languages(self, db_session):
        requests = [
            TranslationRequest("Afrikaans", uuid4()),
            TranslationRequest("afrikaans", uuid4()),
        ]
        with pytest.raises(ValidationError, match="duplicate"):
            await create_translations(db_session, make_actor(), uuid4(), requests)

    @pytest.mark.asyncio
    async def test_missing_parent(self, db_session):
        with patch(f"{REPO}.get_item", AsyncMock(return_value=None)):
            with pytest.raises(NotFoundError):
                await create_translations(
                    db_session, make_actor(), uuid4(), [TranslationRequest("xhosa", uuid4())]
                )

    @pytest.mark.asyncio
    async def test_parent_must_be_approved(self, db_session, taxonomy):
        parent = make_ready_item(taxonomy, stage=ContentStage.needs_approver_review)
        with patch(f"{REPO}.get_item", AsyncMock(return_value=parent)):
            with pytest.raises(InvalidTransitionError, match="approved"):
                await create_translations(
                    db_session, make_actor(), parent.id, [TranslationRequest("xhosa", uuid4())]
                )

    @pytest.mark.asyncio
    async def test_translation_cannot_fan_out(self, db_session, taxonomy, fan_out_parent):
        translation = make_translation(fan_out_parent, taxonomy.afrikaans, stage=ContentStage.approved)
        with patch(f"{REPO}.get_item", AsyncMock(return_value=translation)):
            with pytest.raises(InvalidTransitionError):
                await create_translations(
                    db_session, make_actor(), translation.id, [TranslationRequest("xhosa", uuid4())]
                )

    @pytest.mark.asyncio
    async def test_rerun_is_rejected(self, db_session, taxonomy, fan_out_parent):
        existing = make_translation(fan_out_parent, taxonomy.afrikaans)
        with patch(f"{REPO}.get_item", AsyncMock(return_value=fan_out_parent)), \
             patch(f"{REPO}.list_translations", AsyncMock(return_value=[existing])):
            with pytest.raises(InvalidTransitionError, match="already has 1"):
                await create_translations(
                    db_session, make_actor(), fan_out_parent.id, [TranslationRequest("xhosa", uuid4())]
                )

    @pytest.mark.asyncio
    async def test_parent_language_rejected(self, db_session, fan_out_parent):
        with patch(f"{REPO}.get_item", AsyncMock(return_value=fan_out_parent)), \
             patch(f"{REPO}.list_translations", AsyncMock(return_value=[])):
            with pytest.raises(ValidationError, match="already written in english"):
                await create_translations(
                    db_session, make_actor(), fan_out_parent.id, [TranslationRequest("English", uuid4())]
                )

    @pytest.mark.asyncio
    async def test_unknown_language(self, db_session, fan_out_parent, languages):
        with patch(f"{REPO}.get_item", AsyncMock(return_value=fan_out_parent)), \
             patch(f"{REPO}.list_translations", AsyncMock(return_value=[])), \
             patch(f"{REPO}.get_active_language", AsyncMock(side_effect=languages)):
            with pytest.raises(ValidationError, match="unknown language 'zulu'"):
                await create_translations(
                    db_session, make_actor(), fan_out_parent.id, [TranslationRequest("Zulu", uuid4())]
                )

    @pytest.mark.asyncio
    async def test_translator_role(self, db_session, fan_out_parent, languages):
        intern = UserFactory.create(role=StaffRole.intern)
        with patch(f"{REPO}.get_item", AsyncMock(return_value=fan_out_parent)), \
             patch(f"{REPO}.list_translations", AsyncMock(return_value=[])), \
             patch(f"{REPO}.get_active_language", AsyncMock(side_effect=languages)), \
             patch(f"{REPO}.get_user", AsyncMock(return_value=intern)):
            with pytest.raises(ValidationError, match="journalist or above"):
                await create_translations(
                    db_session, make_actor(), fan_out_parent.id, [TranslationRequest("xhosa", intern.id)]
                )


# ---------------------------------------------------------------------------
# Auto-advance
# ---------------------------------------------------------------------------


class TestAutoAdvance:
    @pytest.mark.asyncio
    async def test_two_translations_advance_parent_on_second(self, db_session, taxonomy, fan_out_parent):
        actor = make_actor(StaffRole.sub_editor)
        af = make_translation(fan_out_parent, taxonomy.afrikaans, stage=ContentStage.translated)
        xh = make_translation(fan_out_parent, taxonomy.xhosa, stage=ContentStage.needs_approver_review)

        with patch(f"{REPO}.list_translations", AsyncMock(return_value=[af, xh])):
            assert await auto_advance_parent(db_session, actor, fan_out_parent) is False
        assert fan_out_parent.stage == ContentStage.approved.value

        xh.stage = ContentStage.translated.value
        with patch(f"{REPO}.list_translations", AsyncMock(return_value=[af, xh])):
            assert await auto_advance_parent(db_session, actor, fan_out_parent) is True
        assert fan_out_parent.stage == ContentStage.translated.value
        assert [a.action for a in _added(db_session, AuditLog)] == ["AUTO_MARK_TRANSLATED"]

    @pytest.mark.asyncio
    async def test_published_sibling_counts_as_complete(self, db_session, taxonomy, fan_out_parent):
        af = make_translation(fan_out_parent, taxonomy.afrikaans, stage=ContentStage.published)
        xh = make_translation(fan_out_parent, taxonomy.xhosa, stage=ContentStage.approved)
        with patch(f"{REPO}.list_translations", AsyncMock(return_value=[af, xh])):
            assert await auto_advance_parent(db_session, make_actor(), fan_out_parent) is True

    @pytest.mark.asyncio
    async def test_parent_past_approved_is_left_alone(self, db_session, taxonomy):
        parent = make_ready_item(taxonomy, stage=ContentStage.published)
        lookup = AsyncMock(return_value=[])
        with patch(f"{REPO}.list_translations", lookup):
            assert await auto_advance_parent(db_session, make_actor(), parent) is False
        lookup.assert_not_awaited()
        assert parent.stage == ContentStage.published.value


# ---------------------------------------------------------------------------
# Publish cascade
# ---------------------------------------------------------------------------


class TestPublishCascade:
    def _published_parent(self, taxonomy):
        parent = make_ready_item(taxonomy, stage=ContentStage.published)
        parent.published_at = datetime(2026, 5, 4, 6, 0, tzinfo=timezone.utc)
        parent.published_by = uuid4()
        return parent

    @pytest.mark.asyncio
    async def test_all_mode_publishes_regardless_of_stage(self, db_session, taxonomy):
        parent = self._published_parent(taxonomy)
        draft = make_translation(parent, taxonomy.afrikaans, stage=ContentStage.draft)
        done = make_translation(parent, taxonomy.xhosa, stage=ContentStage.translated)

        count = await publish_translations(
            db_session, make_actor(), parent, [draft, done], mode=PublishCascadeMode.all
        )

        assert count == 2
        for t in (draft, done):
            assert t.stage == ContentStage.published.value
            assert t.published_at == parent.published_at
            assert t.published_by == parent.published_by
        assert [a.action for a in _added(db_session, AuditLog)] == [
            "AUTO_PUBLISH_TRANSLATION",
            "AUTO_PUBLISH_TRANSLATION",
        ]

    @pytest.mark.asyncio
    async def test_completed_only_mode_skips_unfinished(self, db_session, taxonomy):
        parent = self._published_parent(taxonomy)
        draft = make_translation(parent, taxonomy.afrikaans, stage=ContentStage.draft)
        done = make_translation(parent, taxonomy.xhosa, stage=ContentStage.translated)

        count = await publish_translations(
            db_session, make_actor(), parent, [draft, done], mode=PublishCascadeMode.completed_only
        )

        assert count == 1
        assert draft.stage == ContentStage.draft.value
        assert draft.published_at is None
        assert done.stage == ContentStage.published.value

    @pytest.mark.asyncio
    async def test_already_published_takes_the_parent_timestamp(self, db_session, taxonomy):
        parent = self._published_parent(taxonomy)
        earlier = datetime(2026, 5, 1, tzinfo=timezone.utc)
        published = make_translation(
            parent, taxonomy.afrikaans, stage=ContentStage.published, published_at=earlier
        )
        count = await publish_translations(
            db_session, make_actor(), parent, [published], mode=PublishCascadeMode.all
        )
        assert count == 1
        assert published.stage == ContentStage.published.value
        assert published.published_at == parent.published_at
        assert published.published_by == parent.published_by
        assert _added(db_session, AuditLog)[0].details["previous_stage"] == "published"

    def test_mode_from_environment(self, monkeypatch):
        monkeypatch.delenv("PUBLISH_CASCADE_MODE", raising=False)
        assert get_publish_cascade_mode() == PublishCascadeMode.all
        monkeypatch.setenv("PUBLISH_CASCADE_MODE", "completed_only")
        assert get_publish_cascade_mode() == PublishCascadeMode.completed_only
        monkeypatch.setenv("PUBLISH_CASCADE_MODE", "sometimes")
        assert get_publish_cascade_mode() == PublishCascadeMode.all


class TestTranslationSummary:
    def test_counts(self, taxonomy):
        parent = make_ready_item(taxonomy, stage=ContentStage.approved)
        translations = [
            make_translation(parent, taxonomy.afrikaans, stage=ContentStage.draft),
            make_translation(parent, taxonomy.xhosa, stage=ContentStage.translated),
            make_translation(parent, taxonomy.english, stage=ContentStage.published),
        ]
        summary = translation_summary(translations)
        assert summary["total"] == 3
        assert summary["completed"] == 2
        assert summary["published"] == 1
        assert summary["by_stage"]["draft"] == 1
