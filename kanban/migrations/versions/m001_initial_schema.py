"""Boards, columns and cards.

Revision ID: 001
"""
import sqlalchemy as sa
from alembic.operations import Operations

revision = "001"
name = "initial_schema"


def upgrade(op: Operations) -> None:
    op.create_table(
        "boards",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "columns",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "board_id",
            sa.String(length=36),
            sa.ForeignKey("boards.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "cards",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "board_id",
            sa.String(length=36),
            sa.ForeignKey("boards.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "column_id",
            sa.String(length=36),
            sa.ForeignKey("columns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("assignee", sa.String(length=255), nullable=True),
        sa.Column("due_date", sa.String(length=50), nullable=True),
        sa.Column("labels", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("priority", sa.String(length=50), nullable=False, server_default="medium"),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_columns_board", "columns", ["board_id"])
    op.create_index("idx_cards_column", "cards", ["column_id"])
    op.create_index("idx_cards_board", "cards", ["board_id"])
