from logging.config import fileConfig
import sys
from pathlib import Path

from sqlalchemy import engine_from_config, pool
from alembic import context

# -------------------------------------------------
# 1. Make sure project root is on sys.path
#    (alembic is executed from the repo root, so `src` is already importable
#     if the project is installed, but this is bullet-proof.)
# -------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.append(str(PROJECT_ROOT))

from src.tools.migrations import to_sync_url  # noqa: E402

config = context.config

# -------------------------------------------------
# 2. Resolve the database URL: an explicit sqlalchemy.url (set by
#    src.tools.migrations.alembic_config) wins over the app settings.
#    Alembic is sync, so the URL is rewritten for psycopg.
# -------------------------------------------------
configured_url = config.get_main_option("sqlalchemy.url")
if not configured_url:
    from src.config import settings  # noqa: E402

    configured_url = str(settings.DATABASE_URL)

sync_url = to_sync_url(configured_url)
config.set_main_option("sqlalchemy.url", sync_url.replace("%", "%%"))

# -------------------------------------------------
# usual Alembic boilerplate below …
# -------------------------------------------------
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

# Migrations are hand-written SQL; there is no ORM metadata to autogenerate from.
target_metadata = None


# -------------------------------------------------
def run_migrations_offline() -> None:
    context.configure(
        url=sync_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
