"""002: create users table (identity boundary)

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users are never deleted: is_active = FALSE deactivates a login
    op.execute("""
        CREATE TABLE users (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            username        VARCHAR(64)     NOT NULL,
            email           VARCHAR(255)    NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            is_admin        BOOLEAN         NOT NULL DEFAULT FALSE,
            last_login_at   TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username        UNIQUE (username),
            CONSTRAINT uq_users_email           UNIQUE (email),
            CONSTRAINT ck_users_username_chars  CHECK (username ~ '^[A-Za-z0-9_]{3,64}$')
        );
    """)
    op.execute("CREATE INDEX idx_users_active ON users (is_active) WHERE is_active;")
    op.execute("CREATE INDEX idx_users_admin ON users (is_admin) WHERE is_admin;")
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE users IS 'Login identities; one points account each (accounts.user_id)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
