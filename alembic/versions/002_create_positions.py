"""002: create positions table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            address         VARCHAR(64)     PRIMARY KEY,
            owner           VARCHAR(128)    NOT NULL,
            market_ref      VARCHAR(64)     NOT NULL REFERENCES markets (address),
            side            VARCHAR(3)      NOT NULL,
            amount          NUMERIC(20,0)   NOT NULL,
            claimed         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_positions_market_owner UNIQUE (market_ref, owner),
            CONSTRAINT ck_positions_side   CHECK (side IN ('YES', 'NO')),
            CONSTRAINT ck_positions_amount CHECK (amount BETWEEN 1 AND 18446744073709551615)
        );
    """)
    op.execute("CREATE INDEX idx_positions_market_side ON positions (market_ref, side);")
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE positions IS 'One stake per (market, owner); side fixed at first bet';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
