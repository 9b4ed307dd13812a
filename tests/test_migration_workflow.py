"""Tests for keeping the posts schema at the Alembic head."""

import logging
from unittest.mock import patch

import pytest
from backend.app.core.settings import settings
from backend.app.db.engine import engine
from backend.app.db.migrations import (
    MigrationError,
    alembic_config,
    check_schema_current,
    get_current_revision,
    get_head_revision,
    run_migrations,
)
from sqlalchemy import inspect


class TestPostsSchema:
    def test_posts_table_created(self) -> None:
        assert "posts" in inspect(engine).get_table_names()

    def test_posts_columns_match_model(self) -> None:
        columns = {c["name"]: c for c in inspect(engine).get_columns("posts")}
        assert set(columns) == {"id", "title", "content", "price", "created_at", "updated_at"}
        assert not columns["price"]["nullable"]

    def test_database_recorded_at_head(self) -> None:
        assert get_current_revision() == get_head_revision()
        assert check_schema_current() is True

    def test_config_targets_app_db_path(self) -> None:
        assert alembic_config().get_main_option("sqlalchemy.url") == settings.database_url


class TestRunMigrations:
    def test_at_head_skips_upgrade(self) -> None:
        with patch("backend.app.db.migrations.command.upgrade") as upgrade:
            run_migrations()
        upgrade.assert_not_called()

    def test_behind_head_upgrades(self) -> None:
        with (
            patch("backend.app.db.migrations.get_current_revision", return_value=None),
            patch("backend.app.db.migrations.command.upgrade") as upgrade,
        ):
            run_migrations()
        upgrade.assert_called_once()
        assert upgrade.call_args.args[1] == "head"

    def test_failure_names_revision_and_cause(self, caplog: pytest.LogCaptureFixture) -> None:
        with (
            patch("backend.app.db.migrations.get_current_revision", return_value="0ld"),
            patch(
                "backend.app.db.migrations.command.upgrade",
                side_effect=RuntimeError("table posts already exists"),
            ),
            caplog.at_level(logging.ERROR),
            pytest.raises(MigrationError, match="current=0ld") as exc_info,
        ):
            run_migrations()
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "table posts already exists" in str(exc_info.value)
        assert "db_migration_failed" in caplog.text


class TestSchemaDrift:
    def test_unmigrated_database_is_behind(self, caplog: pytest.LogCaptureFixture) -> None:
        with (
            patch("backend.app.db.migrations.get_current_revision", return_value=None),
            caplog.at_level(logging.WARNING),
        ):
            assert check_schema_current() is False
        assert "db_schema_drift" in caplog.text
        assert "make migrate" in caplog.text
