import logging
import sys

ROOT_LOGGER = "solestore"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        root.propagate = False
    return root


def set_log_level(level: int | str) -> None:
    """Level for every solestore.* logger (DEBUG when settings.debug is on)."""
    _root().setLevel(level)


class Logger:
    """Named child of the `solestore` logger; all children share one stdout handler."""

    def __init__(self, name: str):
        _root()
        self._logger = logging.getLogger(f"{ROOT_LOGGER}.{name}")

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        """Error with the active traceback attached."""
        self._logger.exception(msg, *args, **kwargs)
