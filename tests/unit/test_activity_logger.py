"""ActivityLogger unit tests with a mocked log repository."""

import logging
from unittest.mock import AsyncMock

import pytest

from activity_logger.application.services.activity_logger import (
    ActivityLogger,
    LoggerConfig,
)
from activity_logger.application.services.identity_resolver import EntityRegistry
from activity_logger.domain.exceptions import ValidationException
from activity_logger.infrastructure.persistence.models.activity_log import ActivityLog
from activity_logger.shared.enums import ActivityAction, LogLevel
from tests.sample_models import Article, Author, Comment, User


@pytest.fixture
def log_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.save_atomic = AsyncMock(side_effect=lambda rows: [])
    repo.find_by_scope = AsyncMock(return_value=[])
    return repo


def _saved_rows(log_repo: AsyncMock) -> list:
    log_repo.save_atomic.assert_awaited_once()
    return list(log_repo.save_atomic.call_args.args[0])


class TestConfiguration:
    """Scope / issuer / message builder getters and setters."""

    def test_default_scope_is_own_type(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        assert logger.type_name == "Comment"
        assert logger.get_scope() == {"Comment": None}

    def test_type_name_alias_is_registered(self, log_repo: AsyncMock) -> None:
        registry = EntityRegistry()
        logger = ActivityLogger(Comment, log_repo, registry=registry, type_name="Comments")
        assert logger.type_name == "Comments"
        assert logger.get_scope() == {"Comments": None}
        assert registry.resolve(Comment(id=1, body="x")) == ("Comments", 1)

    def test_setters_chain_and_reset(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(
            Comment, log_repo, LoggerConfig(scope=[Comment, Article, Author])
        )
        article = Article(id=5, title="t")
        result = logger.set_scope([Comment, article]).set_issuer(User(id=9, username="u"))
        assert result is logger
        assert logger.get_scope() == {"Comment": None, "Article": 5}
        logger.reset_scope()
        assert logger.get_scope() == {"Comment": None, "Article": None, "Author": None}

    def test_set_issuer_binds_into_scope_when_type_is_scoped(
        self, log_repo: AsyncMock
    ) -> None:
        logger = ActivityLogger(Comment, log_repo, LoggerConfig(scope=[Comment, User]))
        actor = User(id=9, username="u")
        logger.set_issuer(actor)
        assert logger.get_issuer() is actor
        assert logger.get_scope()["User"] == 9

    def test_set_issuer_does_not_add_unscoped_type(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo, LoggerConfig(scope=[Comment]))
        logger.set_issuer(User(id=9, username="u"))
        assert logger.get_scope() == {"Comment": None}

    def test_issuer_from_config_is_bound(self, log_repo: AsyncMock) -> None:
        config = LoggerConfig(scope=[Comment, User], issuer=User(id=4, username="u"))
        logger = ActivityLogger(Comment, log_repo, config)
        assert logger.get_scope() == {"Comment": None, "User": 4}

    def test_issuer_without_id_unbinds_previous_issuer(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo, LoggerConfig(scope=[Comment, User]))
        logger.set_issuer(User(id=9, username="u"))
        logger.set_issuer(User(username="unsaved"))
        assert logger.get_scope() == {"Comment": None, "User": None}

    async def test_cleared_issuer_no_longer_scopes_rows(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo, LoggerConfig(scope=[Comment, User]))
        logger.set_issuer(User(id=9, username="u")).set_issuer(None)

        rows = await logger.on_after_save(Comment(id=1, body="x"), is_new=True)

        assert logger.get_issuer() is None
        assert [(r.scope_type, r.scope_id, r.issuer_type) for r in rows] == [
            ("Comment", 1, None)
        ]

    def test_issuer_of_other_type_unbinds_previous_issuer(
        self, log_repo: AsyncMock
    ) -> None:
        logger = ActivityLogger(
            Comment, log_repo, LoggerConfig(scope=[Comment, User, Author])
        )
        logger.set_issuer(User(id=9, username="u")).set_issuer(Author(id=3, name="a"))
        assert logger.get_scope() == {"Comment": None, "User": None, "Author": 3}

    def test_log_model_mismatch_is_reported(
        self, log_repo: AsyncMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        log_repo.model = ActivityLog
        with caplog.at_level(logging.WARNING):
            ActivityLogger(Comment, log_repo, LoggerConfig(log_model=Article))
        assert "log_model Article ignored" in caplog.text

        caplog.clear()
        with caplog.at_level(logging.WARNING):
            ActivityLogger(Comment, log_repo, LoggerConfig(log_model=ActivityLog))
        assert caplog.text == ""

    def test_message_builder_roundtrip(self, log_repo: AsyncMock) -> None:
        def builder(record, context):
            return "m"

        logger = ActivityLogger(Comment, log_repo)
        assert logger.get_message_builder() is None
        assert logger.set_message_builder(builder) is logger
        assert logger.get_message_builder() is builder


class TestLifecycleHooks:
    """on_after_save / on_after_delete build, fan out and persist."""

    async def test_update_fans_out_to_all_scopes(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(
            Comment, log_repo, LoggerConfig(scope=[Comment, Article, Author])
        )
        logger.set_scope(
            [Comment, Article(id=5, title="t"), Author(id=3, name="a")]
        ).set_issuer(User(id=9, username="u"))
        comment = Comment(id=1, article_id=5, body="edited")

        rows = await logger.on_after_save(comment, is_new=False, changed_fields={"body"})

        assert rows == _saved_rows(log_repo)
        assert [(r.scope_type, r.scope_id) for r in rows] == [
            ("Comment", 1),
            ("Article", 5),
            ("Author", 3),
        ]
        for row in rows:
            assert (row.issuer_type, row.issuer_id) == ("User", 9)
            assert row.action == ActivityAction.UPDATE
            assert row.data == {"body": "edited"}
            assert row.level == "info"

    async def test_create_logs_full_snapshot(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        comment = Comment(id=2, article_id=5, body="new", internal_note="n")

        rows = await logger.on_after_save(comment, is_new=True)

        assert len(rows) == 1
        assert rows[0].action == ActivityAction.CREATE
        assert rows[0].data == {"id": 2, "article_id": 5, "body": "new"}

    async def test_delete_logs_full_snapshot(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo, LoggerConfig(scope=[Comment]))
        comment = Comment(id=2, body="bye")

        rows = await logger.on_after_delete(comment)

        assert [(r.scope_type, r.scope_id, r.action) for r in rows] == [
            ("Comment", 2, ActivityAction.DELETE)
        ]
        assert rows[0].data == {"id": 2, "body": "bye"}

    async def test_message_builder_sets_message(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        logger.set_message_builder(
            lambda record, ctx: f"{record.action.value} {ctx['object'].body}"
        )
        rows = await logger.on_after_delete(Comment(id=2, body="bye"))
        assert rows[0].message == "delete bye"

    async def test_message_builder_error_propagates_before_persisting(
        self, log_repo: AsyncMock
    ) -> None:
        def broken(record, context):
            raise KeyError("missing")

        logger = ActivityLogger(Comment, log_repo, LoggerConfig(message_builder=broken))
        with pytest.raises(KeyError):
            await logger.on_after_save(Comment(id=1, body="x"), is_new=True)
        log_repo.save_atomic.assert_not_awaited()

    async def test_all_unresolved_scope_persists_nothing(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo, LoggerConfig(scope=[Article, Author]))
        rows = await logger.on_after_save(Comment(id=1, body="x"), is_new=True)
        assert rows == []
        log_repo.save_atomic.assert_not_awaited()


class TestCustomLog:
    """log(): custom entries with per-call context."""

    async def test_without_subject_and_default_scope_writes_nothing(
        self, log_repo: AsyncMock
    ) -> None:
        logger = ActivityLogger(Comment, log_repo)
        rows = await logger.log("warning", "rate limit hit", data={"ip": "1.2.3.4"})
        assert rows == []
        log_repo.save_atomic.assert_not_awaited()

    async def test_ad_hoc_scope_does_not_change_configuration(
        self, log_repo: AsyncMock
    ) -> None:
        logger = ActivityLogger(Comment, log_repo)
        article = Article(id=5, title="t")

        rows = await logger.log(
            LogLevel.NOTICE, "moderation queue full", scope=[article], data={"n": 10}
        )

        assert [(r.scope_type, r.scope_id) for r in rows] == [("Article", 5)]
        assert rows[0].level == "notice"
        assert rows[0].action == ActivityAction.CUSTOM
        assert rows[0].message == "moderation queue full"
        assert rows[0].data == {"n": 10}
        assert (rows[0].subject_type, rows[0].subject_id) == (None, None)
        assert logger.get_scope() == {"Comment": None}

    async def test_subject_defaults_data_to_snapshot(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        comment = Comment(id=3, body="flagged", internal_note="n")

        rows = await logger.log("info", "flagged", subject=comment, action="update")

        assert [(r.scope_type, r.scope_id) for r in rows] == [("Comment", 3)]
        assert rows[0].action == ActivityAction.UPDATE
        assert rows[0].data == {"id": 3, "body": "flagged"}

    async def test_issuer_in_configured_scope_is_added(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo, LoggerConfig(scope=[Comment, User]))
        rows = await logger.log(
            "info",
            "exported comments",
            issuer=User(id=9, username="u"),
            scope=[Article(id=5, title="t")],
        )
        assert [(r.scope_type, r.scope_id) for r in rows] == [("Article", 5), ("User", 9)]
        assert logger.get_scope() == {"Comment": None, "User": None}

    async def test_default_issuer_is_configured_issuer(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        logger.set_issuer(User(id=9, username="u"))
        rows = await logger.log("info", "ping", subject=Comment(id=1, body="x"))
        assert (rows[0].issuer_type, rows[0].issuer_id) == ("User", 9)

    async def test_subject_of_other_type_is_not_self_substituted(
        self, log_repo: AsyncMock
    ) -> None:
        logger = ActivityLogger(Comment, log_repo)
        rows = await logger.log("info", "article touched", subject=Article(id=5, title="t"))
        assert rows == []

    async def test_unknown_level_is_rejected(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        with pytest.raises(ValidationException) as exc_info:
            await logger.log("loud", "x")
        assert exc_info.value.details == {"field": "level"}

    async def test_unknown_action_is_rejected(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        with pytest.raises(ValidationException) as exc_info:
            await logger.log("info", "x", action="archive")
        assert exc_info.value.details == {"field": "action"}


class TestFindActivity:
    """find_activity delegates to the repository's scope query."""

    async def test_own_type_without_subject(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        await logger.find_activity()
        log_repo.find_by_scope.assert_awaited_once_with("Comment", skip=0, limit=100)

    async def test_subject_of_any_type(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        await logger.find_activity(Article(id=5, title="t"), limit=10)
        log_repo.find_by_scope.assert_awaited_once_with("Article", 5, skip=0, limit=10)

    async def test_unsaved_subject_has_no_activity(self, log_repo: AsyncMock) -> None:
        logger = ActivityLogger(Comment, log_repo)
        assert await logger.find_activity(Article(title="draft")) == []
        log_repo.find_by_scope.assert_not_awaited()
