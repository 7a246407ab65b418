import logging
from logging import Logger

from rich.console import Console
from rich.logging import RichHandler


def configure_logger(instrument_logger: Logger | None = None, level: int = logging.INFO) -> Console:
    """
    Replaces the handlers of the v4_index logger with a RichHandler writing to a new console.

    :param instrument_logger: logger to configure.  Defaults to the nethermind.v4_index root logger
    :param level: log level
    :return: console used by the handler
    """
    if instrument_logger is None:
        instrument_logger = logging.getLogger("nethermind").getChild("v4_index")

    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(level)
    return rich_console
