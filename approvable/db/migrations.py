"""Alembic helpers for approvable tables.

In a revision::

    from alembic import op
    from approvable.db.migrations import add_approval_columns, drop_approval_columns

    def upgrade() -> None:
        add_approval_columns(op, "posts")

    def downgrade() -> None:
        drop_approval_columns(op, "posts")

Pass ``status_column=`` when the model declares ``APPROVAL_STATUS``.
"""
from typing import List

import sqlalchemy as sa
from alembic.operations import Operations

from approvable.core.approval.states import (
    APPROVAL_AT_COLUMN,
    DEFAULT_STATUS_COLUMN,
    INITIAL_STATUS,
)


def status_index_name(table_name: str, status_column: str = DEFAULT_STATUS_COLUMN) -> str:
    # Same name SQLAlchemy derives for Column(index=True)
    return f"ix_{table_name}_{status_column}"


def approval_columns(status_column: str = DEFAULT_STATUS_COLUMN) -> List[sa.Column]:
    """New Column objects for op.create_table(); build a fresh list per table."""
    return [
        sa.Column(
            status_column,
            sa.SmallInteger(),
            nullable=False,
            server_default=str(INITIAL_STATUS.value),
        ),
        sa.Column(APPROVAL_AT_COLUMN, sa.DateTime(), nullable=True),
    ]


def add_approval_columns(
    op: Operations,
    table_name: str,
    status_column: str = DEFAULT_STATUS_COLUMN,
) -> None:
    """Add the status and approval_at columns (and the status index) to a table."""
    for column in approval_columns(status_column):
        op.add_column(table_name, column)
    op.create_index(status_index_name(table_name, status_column), table_name, [status_column])


def drop_approval_columns(
    op: Operations,
    table_name: str,
    status_column: str = DEFAULT_STATUS_COLUMN,
) -> None:
    """Reverse add_approval_columns. Uses batch mode so it also works on SQLite."""
    op.drop_index(status_index_name(table_name, status_column), table_name=table_name)
    with op.batch_alter_table(table_name) as batch_op:
        batch_op.drop_column(APPROVAL_AT_COLUMN)
        batch_op.drop_column(status_column)
