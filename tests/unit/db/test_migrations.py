"""Tests for the Alembic approval-column helpers, run against SQLite."""

import pytest
import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from approvable.db.migrations import (
    add_approval_columns,
    approval_columns,
    drop_approval_columns,
    status_index_name,
)


pytestmark = pytest.mark.db


@pytest.fixture
def connection(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrations.db'}")
    with engine.begin() as conn:
        yield conn
    engine.dispose()


@pytest.fixture
def op(connection):
    ops = Operations(MigrationContext.configure(connection))
    ops.create_table("posts", sa.Column("id", sa.Integer(), primary_key=True))
    return ops


def _columns(connection, table):
    return {column["name"]: column for column in sa.inspect(connection).get_columns(table)}


def _indexes(connection, table):
    return {index["name"] for index in sa.inspect(connection).get_indexes(table)}


class TestApprovalColumns:

    def test_default_names(self):
        names = [column.name for column in approval_columns()]
        assert names == ["approval_status", "approval_at"]

    def test_custom_status_name(self):
        names = [column.name for column in approval_columns("state")]
        assert names == ["state", "approval_at"]

    def test_fresh_objects_each_call(self):
        assert approval_columns()[0] is not approval_columns()[0]

    def test_create_table(self, connection, op):
        op.create_table("comments", sa.Column("id", sa.Integer(), primary_key=True), *approval_columns())

        columns = _columns(connection, "comments")
        assert columns["approval_status"]["nullable"] is False
        assert columns["approval_at"]["nullable"] is True

    def test_index_name(self):
        assert status_index_name("posts") == "ix_posts_approval_status"
        assert status_index_name("posts", "state") == "ix_posts_state"


class TestAddDrop:

    def test_add(self, connection, op):
        add_approval_columns(op, "posts")

        columns = _columns(connection, "posts")
        assert {"id", "approval_status", "approval_at"} <= set(columns)
        assert "ix_posts_approval_status" in _indexes(connection, "posts")

    def test_existing_rows_default_to_pending(self, connection, op):
        connection.execute(sa.text("INSERT INTO posts (id) VALUES (1)"))

        add_approval_columns(op, "posts")

        row = connection.execute(sa.text("SELECT approval_status, approval_at FROM posts")).one()
        assert row.approval_status == 0
        assert row.approval_at is None

    def test_custom_status_column(self, connection, op):
        add_approval_columns(op, "posts", status_column="state")

        assert "state" in _columns(connection, "posts")
        assert "ix_posts_state" in _indexes(connection, "posts")

    def test_drop(self, connection, op):
        add_approval_columns(op, "posts", status_column="state")

        drop_approval_columns(op, "posts", status_column="state")

        assert set(_columns(connection, "posts")) == {"id"}
        assert _indexes(connection, "posts") == set()
