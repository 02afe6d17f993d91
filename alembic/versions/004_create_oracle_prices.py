"""004: create oracle_prices table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Written by the external price publisher; raw i64/i32/u64 readings.
    op.execute("""
        CREATE TABLE oracle_prices (
            id              BIGSERIAL       PRIMARY KEY,
            feed_id         VARCHAR(128)    NOT NULL,
            price           BIGINT          NOT NULL,
            exponent        INT             NOT NULL,
            confidence      NUMERIC(20,0)   NOT NULL,
            publish_time    BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_oracle_conf_u64 CHECK (confidence BETWEEN 0 AND 18446744073709551615)
        );
    """)
    op.execute("CREATE INDEX idx_oracle_feed_time ON oracle_prices (feed_id, publish_time DESC, id DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS oracle_prices CASCADE;")
