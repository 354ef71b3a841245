"""004: create events and event_options tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE events (
            id                  VARCHAR(64)     PRIMARY KEY,
            title               VARCHAR(255)    NOT NULL,
            description         TEXT            NOT NULL,
            category            VARCHAR(50),
            start_time          TIMESTAMPTZ     NOT NULL,
            end_time            TIMESTAMPTZ     NOT NULL,
            min_stake           BIGINT          NOT NULL DEFAULT 10,
            max_stake           BIGINT          NOT NULL DEFAULT 1000,
            status              VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            winning_option_id   VARCHAR(64),
            resolved_at         TIMESTAMPTZ,
            created_by          VARCHAR(64),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_events_status CHECK (status IN ('ACTIVE', 'INACTIVE', 'RESOLVED')),
            CONSTRAINT ck_events_time_window CHECK (end_time > start_time),
            CONSTRAINT ck_events_min_stake CHECK (min_stake >= 1),
            CONSTRAINT ck_events_stake_range CHECK (max_stake >= min_stake),
            CONSTRAINT ck_events_resolution CHECK (
                (status = 'RESOLVED') = (winning_option_id IS NOT NULL AND resolved_at IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_events_status_start ON events (status, start_time);")
    op.execute("CREATE INDEX idx_events_category ON events (category) WHERE category IS NOT NULL;")
    op.execute("""
        CREATE TRIGGER trg_events_updated_at
            BEFORE UPDATE ON events
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE event_options (
            id          VARCHAR(64)     PRIMARY KEY,
            event_id    VARCHAR(64)     NOT NULL REFERENCES events (id),
            label       VARCHAR(255)    NOT NULL,
            odds        NUMERIC(8, 2)   NOT NULL,
            position    SMALLINT        NOT NULL DEFAULT 0,
            is_winning  BOOLEAN         NOT NULL DEFAULT FALSE,
            CONSTRAINT ck_event_options_odds_gte_1 CHECK (odds >= 1.00),
            CONSTRAINT ck_event_options_label_not_empty CHECK (LENGTH(TRIM(label)) > 0)
        );
    """)
    op.execute("CREATE INDEX idx_event_options_event ON event_options (event_id, odds);")
    # At most one winning option per event
    op.execute("""
        CREATE UNIQUE INDEX uq_event_options_winner
        ON event_options (event_id)
        WHERE is_winning;
    """)
    op.execute("COMMENT ON TABLE events IS 'Admin-curated events; RESOLVED rows are immutable';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS event_options CASCADE;")
    op.execute("DROP TABLE IF EXISTS events CASCADE;")
