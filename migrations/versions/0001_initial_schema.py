"""initial ledger schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AMOUNT = sa.Numeric(40, 16)


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quote_currency", sa.String(length=10), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("memo", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("quote_currency", sa.String(length=10), nullable=False),
        sa.Column("voided", sa.Boolean(), nullable=False),
        sa.Column("void_reason", sa.String(length=255), nullable=True),
        sa.Column("original_id", sa.Integer(), nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["original_id"], ["journal_entries.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_journal_entries_book_id", "journal_entries", ["book_id"]
    )
    op.create_index(
        "ix_journal_entries_timestamp", "journal_entries", ["timestamp"]
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("journal_entry_id", sa.Integer(), nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("account", sa.String(length=255), nullable=False),
        sa.Column("credit", AMOUNT, nullable=False),
        sa.Column("debit", AMOUNT, nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("exchange_rate", AMOUNT, nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("voided", sa.Boolean(), nullable=False),
        sa.Column("void_reason", sa.String(length=255), nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["journal_entry_id"], ["journal_entries.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_transactions_journal_entry_id", "transactions", ["journal_entry_id"]
    )
    op.create_index("ix_transactions_book_id", "transactions", ["book_id"])
    op.create_index("ix_transactions_account", "transactions", ["account"])
    op.create_index("ix_transactions_timestamp", "transactions", ["timestamp"])

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("account_code", sa.Integer(), nullable=False),
        sa.Column("account_name", sa.String(length=255), nullable=False),
        sa.Column(
            "to_increase",
            sa.Enum("DEBIT", "CREDIT", name="entry_type_enum"),
            nullable=False,
        ),
        sa.Column("classification", sa.String(length=100), nullable=True),
        sa.Column("account_type", sa.String(length=100), nullable=True),
        sa.Column("sub_account_type", sa.String(length=100), nullable=True),
        sa.Column("memo", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_code"),
        sa.UniqueConstraint("account_name"),
    )
    op.create_index("ix_accounts_book_id", "accounts", ["book_id"])


def downgrade() -> None:
    op.drop_index("ix_accounts_book_id", table_name="accounts")
    op.drop_table("accounts")

    op.drop_index("ix_transactions_timestamp", table_name="transactions")
    op.drop_index("ix_transactions_account", table_name="transactions")
    op.drop_index("ix_transactions_book_id", table_name="transactions")
    op.drop_index("ix_transactions_journal_entry_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_journal_entries_timestamp", table_name="journal_entries")
    op.drop_index("ix_journal_entries_book_id", table_name="journal_entries")
    op.drop_table("journal_entries")

    op.drop_table("books")
    sa.Enum(name="entry_type_enum").drop(op.get_bind(), checkfirst=True)
