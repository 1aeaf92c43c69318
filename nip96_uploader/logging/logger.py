import logging
import sys
from typing import TextIO

_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class Log:
    """Client-wide logging. Keyword arguments are appended as ``key=value``.

    Authorization tokens must never be passed in; request tracing only
    carries method, URL and route.
    """

    _logger: logging.Logger = logging.getLogger("nip96_uploader")

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and attach a handler, stderr unless ``stream`` is given."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stderr)
            handler.setFormatter(logging.Formatter(_FORMAT))
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **fields: object) -> None:
        cls._logger.info(cls._render(message, fields))

    @classmethod
    def error(cls, message: str, **fields: object) -> None:
        cls._logger.error(cls._render(message, fields))

    @classmethod
    def warning(cls, message: str, **fields: object) -> None:
        cls._logger.warning(cls._render(message, fields))

    @classmethod
    def debug(cls, message: str, **fields: object) -> None:
        cls._logger.debug(cls._render(message, fields))

    @classmethod
    def request(cls, method: str, url: str, *, use_proxy: bool) -> None:
        """Trace an outgoing request at debug level."""
        cls.debug(f"-> {method} {url}", route="proxy" if use_proxy else "direct")

    @classmethod
    def response(cls, method: str, url: str, status_code: int) -> None:
        cls.debug(f"<- {method} {url}", status=status_code)

    @staticmethod
    def _render(message: str, fields: dict[str, object]) -> str:
        if not fields:
            return message
        return message + " " + " ".join(f"{key}={value}" for key, value in fields.items())
