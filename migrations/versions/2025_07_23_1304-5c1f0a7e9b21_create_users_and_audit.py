"""create users and user_audit

Revision ID: 5c1f0a7e9b21
Revises:
Create Date: 2025-07-23 13:04:46.118204

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '5c1f0a7e9b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
    CREATE EXTENSION IF NOT EXISTS pgcrypto;

    CREATE TABLE users (
        id             uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        email          varchar(255) NOT NULL,
        username       varchar(100),
        password_hash  text NOT NULL,
        is_admin       boolean NOT NULL DEFAULT false,
        is_verified    boolean NOT NULL DEFAULT false,
        created_at     timestamptz NOT NULL DEFAULT now(),
        updated_at     timestamptz NOT NULL DEFAULT now(),
        deleted_at     timestamptz,
        deleted_by     uuid
    );

    -- Back-reference only: cleared when the deleting user is purged
    ALTER TABLE users
        ADD CONSTRAINT fk_deleted_by
        FOREIGN KEY (deleted_by) REFERENCES users(id)
        ON DELETE SET NULL;

    -- Email is unique among ACTIVE users only, case-insensitive
    CREATE UNIQUE INDEX unique_active_users_email
        ON users (LOWER(email))
        WHERE deleted_at IS NULL;

    CREATE INDEX idx_users_deleted_at ON users (deleted_at);
    CREATE INDEX idx_users_deleted_by ON users (deleted_by);
    CREATE INDEX idx_users_admin      ON users (id) WHERE is_admin = true;
    CREATE INDEX idx_users_verified   ON users (id) WHERE is_verified = true;

    -- Purge predicate: deleted more than 7 days before `as_of`
    CREATE OR REPLACE FUNCTION should_purge_user(deleted_at timestamptz, as_of timestamptz DEFAULT now())
    RETURNS boolean STABLE AS $$
        SELECT deleted_at IS NOT NULL AND deleted_at < (as_of - INTERVAL '7 days');
    $$ LANGUAGE SQL;

    -- now() cannot appear in an index predicate, so the reaper scans the
    -- deleted rows ordered by deleted_at and applies the cutoff at query time.
    CREATE INDEX idx_users_purge_eligible
        ON users (deleted_at)
        WHERE deleted_at IS NOT NULL;

    CREATE OR REPLACE FUNCTION update_modified_column()
    RETURNS TRIGGER AS $$
    BEGIN
        NEW.updated_at = now();
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql;

    CREATE TRIGGER update_users_updated_at
        BEFORE UPDATE ON users
        FOR EACH ROW
        EXECUTE FUNCTION update_modified_column();

    -- Append-only log of account actions
    CREATE TABLE user_audit (
        id            bigserial PRIMARY KEY,
        user_id       uuid NOT NULL REFERENCES users(id),
        action        text NOT NULL,
        performed_by  uuid REFERENCES users(id),
        performed_at  timestamptz DEFAULT now()
    );

    CREATE INDEX idx_user_audit_user_id ON user_audit (user_id, performed_at);

    COMMENT ON TABLE users IS 'Stores user account information';
    COMMENT ON COLUMN users.email IS 'User email (case-insensitive, unique among active)';
    COMMENT ON COLUMN users.updated_at IS 'Timestamp of last update (set by trigger)';
    COMMENT ON COLUMN users.deleted_at IS 'Soft delete timestamp (NULL if active)';
    COMMENT ON COLUMN users.deleted_by IS 'ID of admin/user who deleted the account';
    COMMENT ON FUNCTION should_purge_user(timestamptz, timestamptz) IS 'True once a user has been soft-deleted for more than 7 days';
    COMMENT ON FUNCTION update_modified_column() IS 'Updates the updated_at timestamp on row updates';
    COMMENT ON TABLE user_audit IS 'Append-only audit log for user actions';
    """)


def downgrade() -> None:
    op.execute("""
    DROP TABLE IF EXISTS user_audit;
    DROP TRIGGER IF EXISTS update_users_updated_at ON users;
    DROP FUNCTION IF EXISTS update_modified_column();
    DROP INDEX IF EXISTS idx_users_purge_eligible;
    DROP FUNCTION IF EXISTS should_purge_user(timestamptz, timestamptz);
    DROP INDEX IF EXISTS idx_users_verified;
    DROP INDEX IF EXISTS idx_users_admin;
    DROP INDEX IF EXISTS idx_users_deleted_by;
    DROP INDEX IF EXISTS idx_users_deleted_at;
    DROP INDEX IF EXISTS unique_active_users_email;
    DROP TABLE IF EXISTS users;
    """)
