"""
Configuracion de loguru para los comandos de cms-sync.
"""
import sys

from loguru import logger

from cms_sync.shared.exceptions.sync import SyncConfigError

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


def configure_logging(level: str = "INFO", log_file: str = "") -> None:
    """
    Reinicia los sinks de loguru.

    - stderr siempre, al nivel indicado
    - archivo opcional con rotacion (util para migraciones largas)

    Un nivel inexistente o un LOG_FILE no escribible -> SyncConfigError,
    sin tocar los sinks actuales.
    """
    level = level.upper()
    try:
        logger.level(level)
    except ValueError as e:
        raise SyncConfigError(f"LOG_LEVEL inválido: '{level}'", setting="LOG_LEVEL") from e

    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)

    if log_file:
        try:
            logger.add(
                log_file,
                format=LOG_FORMAT,
                rotation="10 MB",
                retention="10 days",
                level=level,
            )
        except OSError as e:
            raise SyncConfigError(f"No se puede escribir LOG_FILE '{log_file}': {e}", setting="LOG_FILE") from e
