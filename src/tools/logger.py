import sys
from pathlib import Path

from loguru import logger

from src.config import project_root_path, settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_PATH = project_root_path / Path(settings.LOG_PATH)
LOG_PATH.mkdir(exist_ok=True)

logger.remove()  # drop default
logger.add(
    LOG_PATH / "store_{time:YYYYMMDD}.log",
    rotation="10 MB",
    retention=3,
    level=LOG_LEVEL,
    enqueue=True,
)
logger.add(sys.stdout, level=LOG_LEVEL, enqueue=True)
