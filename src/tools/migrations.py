from __future__ import annotations

from typing import Optional

from alembic import command
from alembic.config import Config

from src.config import project_root_path
from src.tools.logger import logger


def to_sync_url(url: str) -> str:
    """postgresql://… or postgresql+asyncpg://… -> postgresql+psycopg://…"""
    scheme, sep, rest = str(url).partition("://")
    if not sep:
        raise ValueError(f"Not a database URL: {url!r}")
    if scheme in ("postgres", "postgresql") or scheme.startswith("postgresql+"):
        return f"postgresql+psycopg://{rest}"
    return str(url)


def alembic_config(url: Optional[str] = None) -> Config:
    cfg = Config(str(project_root_path / "alembic.ini"))
    cfg.set_main_option("script_location", str(project_root_path / "migrations"))
    if url:
        # '%' must be escaped for configparser interpolation
        cfg.set_main_option("sqlalchemy.url", to_sync_url(url).replace("%", "%%"))
    # keep loguru in charge of logging when called from Python
    cfg.attributes["configure_logger"] = False
    return cfg


def upgrade_head(url: Optional[str] = None) -> None:
    logger.info("Running Alembic upgrade head.")
    command.upgrade(alembic_config(url), "head")


def downgrade_base(url: Optional[str] = None) -> None:
    logger.warning("Running Alembic downgrade base.")
    command.downgrade(alembic_config(url), "base")
