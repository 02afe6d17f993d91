"""001: create common functions and markets table

Revision ID: 001
Revises: 
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# 2^64 - 1: upper bound for every u64 quantity stored as NUMERIC(20,0)
U64_MAX = "18446744073709551615"


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute(f"""
        CREATE TABLE markets (
            address                 VARCHAR(64)     PRIMARY KEY,
            asset_name              VARCHAR(64)     NOT NULL,
            strike_price            NUMERIC(20,0)   NOT NULL,
            expiry_ts               BIGINT          NOT NULL,
            cutoff_buffer_secs      BIGINT          NOT NULL,
            grace_secs              BIGINT          NOT NULL,
            max_delay_secs          BIGINT          NOT NULL,
            creator                 VARCHAR(128)    NOT NULL,
            keeper                  VARCHAR(128)    NOT NULL,
            oracle_ref              VARCHAR(128)    NOT NULL,
            outcome                 VARCHAR(10)     NOT NULL DEFAULT 'PENDING',
            yes_pool                NUMERIC(20,0)   NOT NULL DEFAULT 0,
            no_pool                 NUMERIC(20,0)   NOT NULL DEFAULT 0,
            settlement_price        NUMERIC(20,0),
            resolved_at             BIGINT,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_asset_name    CHECK (char_length(asset_name) BETWEEN 1 AND 64),
            CONSTRAINT ck_markets_strike_u64    CHECK (strike_price BETWEEN 0 AND {U64_MAX}),
            CONSTRAINT ck_markets_yes_pool_u64  CHECK (yes_pool BETWEEN 0 AND {U64_MAX}),
            CONSTRAINT ck_markets_no_pool_u64   CHECK (no_pool BETWEEN 0 AND {U64_MAX}),
            CONSTRAINT ck_markets_settle_u64    CHECK (
                settlement_price IS NULL OR settlement_price BETWEEN 0 AND {U64_MAX}
            ),
            CONSTRAINT ck_markets_durations     CHECK (
                cutoff_buffer_secs >= 0 AND grace_secs >= 0 AND max_delay_secs > grace_secs
            ),
            CONSTRAINT ck_markets_outcome CHECK (
                outcome IN ('PENDING', 'YES', 'NO', 'REFUNDED')
            ),
            CONSTRAINT ck_markets_resolution CHECK (
                (outcome IN ('YES', 'NO')) = (settlement_price IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_outcome ON markets (outcome);")
    op.execute("CREATE INDEX idx_markets_keeper_pending ON markets (keeper, expiry_ts) WHERE outcome = 'PENDING';")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Binary parimutuel markets: config, pool totals, resolution';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
