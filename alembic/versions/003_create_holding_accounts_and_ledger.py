"""003: create holding_accounts and ledger_entries tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE holding_accounts (
            address         VARCHAR(128)    PRIMARY KEY,
            owner           VARCHAR(128)    NOT NULL,
            balance         NUMERIC(20,0)   NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_holding_balance_u64 CHECK (balance BETWEEN 0 AND 18446744073709551615)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_holding_accounts_updated_at
            BEFORE UPDATE ON holding_accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            account         VARCHAR(128)    NOT NULL,
            entry_type      VARCHAR(30)     NOT NULL,
            amount          NUMERIC(21,0)   NOT NULL,
            balance_after   NUMERIC(20,0)   NOT NULL,
            reference_type  VARCHAR(30)     NOT NULL,
            reference_id    VARCHAR(64)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN ('TRANSFER_DEBIT', 'TRANSFER_CREDIT')
            ),
            CONSTRAINT ck_ledger_reference_type CHECK (
                reference_type IN ('BET', 'SWEEP', 'PAYOUT', 'REFUND')
            ),
            CONSTRAINT ck_ledger_balance_gte_0 CHECK (balance_after >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_account_time ON ledger_entries (account, created_at DESC);")
    op.execute("CREATE INDEX idx_ledger_reference ON ledger_entries (reference_type, reference_id);")
    op.execute("COMMENT ON TABLE ledger_entries IS 'Append-only value movements; never updated or deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
    op.execute("DROP TABLE IF EXISTS holding_accounts CASCADE;")
