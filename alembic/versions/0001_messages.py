"""Create messages table.

Revision ID: 0001_messages
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_messages"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "conversation_id",
            sa.String(length=255),
            nullable=False,
            server_default="default",
        ),
        sa.Column("name", sa.String(length=255)),
        sa.Column("email", sa.String(length=255)),
        sa.Column("linkedin", sa.String(length=500)),
        sa.Column("company", sa.String(length=255)),
        sa.Column("last_contacted", sa.String(length=100)),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("embedding", sa.LargeBinary(), nullable=False),
        sa.Column("created_at", sa.String(length=40), nullable=False),
        sa.Column("connected_already", sa.String(length=5)),
    )
    op.create_index(
        "ix_messages_user_conversation",
        "messages",
        ["user_id", "conversation_id"],
    )
    op.create_index("ix_messages_email", "messages", ["email"])


def downgrade() -> None:
    op.drop_index("ix_messages_email", table_name="messages")
    op.drop_index("ix_messages_user_conversation", table_name="messages")
    op.drop_table("messages")
