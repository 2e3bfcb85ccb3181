"""loguru sinks for the QT.run backend.

Routers tag their messages with an area prefix ("[STRAVA] ...", "[RACES] ...").
Everything about the sinks comes from ``Settings``: level, optional log file,
its rotation and retention, and whether the file holds one JSON record per
line for a log collector instead of plain text.
"""

import sys
from pathlib import Path

from loguru import logger

from qtrun.core.config import Settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} {level: <7} {name}:{line} {message}"


def setup_logger(config: Settings) -> None:
    """Replace loguru's default sink with the ones ``config`` asks for."""
    level = config.log_level.upper()
    logger.remove()

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=config.log_colorize)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=config.log_rotation,
            retention=config.log_retention,
            serialize=config.log_serialize,
        )

    logger.info(f"[LOGGING] level={level} file={config.log_file or '-'}")
