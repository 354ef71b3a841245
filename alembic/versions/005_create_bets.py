"""005: create bets table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bets (
            id                  VARCHAR(64)     PRIMARY KEY,
            user_id             VARCHAR(64)     NOT NULL REFERENCES accounts (user_id),
            event_id            VARCHAR(64)     NOT NULL REFERENCES events (id),
            option_id           VARCHAR(64)     NOT NULL REFERENCES event_options (id),
            amount              BIGINT          NOT NULL,
            odds                NUMERIC(8, 2)   NOT NULL,
            potential_payout    BIGINT          NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            actual_winnings     BIGINT          NOT NULL DEFAULT 0,
            placed_at           TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            resolved_at         TIMESTAMPTZ,
            CONSTRAINT ck_bets_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_bets_odds_gte_1 CHECK (odds >= 1.00),
            CONSTRAINT ck_bets_status CHECK (status IN ('ACTIVE', 'WON', 'LOST')),
            CONSTRAINT ck_bets_winnings CHECK (
                actual_winnings >= 0 AND (status = 'WON' OR actual_winnings = 0)
            )
        );
    """)
    # Single active bet per (user, event); the last guard against concurrent placement
    op.execute("""
        CREATE UNIQUE INDEX uq_bets_active_user_event
        ON bets (user_id, event_id)
        WHERE status = 'ACTIVE';
    """)
    op.execute("CREATE INDEX idx_bets_event_status ON bets (event_id, status);")
    op.execute("CREATE INDEX idx_bets_user_placed ON bets (user_id, placed_at DESC, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_bets_no_delete
            BEFORE DELETE ON bets
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE bets IS 'Wagers; never deleted, ACTIVE -> WON | LOST once';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bets CASCADE;")
