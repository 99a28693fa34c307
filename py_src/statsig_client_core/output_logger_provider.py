import logging
from typing import Optional

LOG_LEVELS = {
    "none": 0,
    "error": 1,
    "warn": 2,
    "info": 3,
    "debug": 4,
}

DEFAULT_LOG_LEVEL = "warn"


class OutputLoggerProvider:
    def init(self):
        pass

    def debug(self, tag: str, msg: str):
        pass

    def info(self, tag: str, msg: str):
        pass

    def warn(self, tag: str, msg: str):
        pass

    def error(self, tag: str, msg: str):
        pass

    def shutdown(self):
        pass


class LoggingOutputLoggerProvider(OutputLoggerProvider):
    """Forwards SDK output to the standard ``logging`` module."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("statsig_client_core")

    def debug(self, tag: str, msg: str):
        self._logger.debug("[Statsig::%s] %s", tag, msg)

    def info(self, tag: str, msg: str):
        self._logger.info("[Statsig::%s] %s", tag, msg)

    def warn(self, tag: str, msg: str):
        self._logger.warning("[Statsig::%s] %s", tag, msg)

    def error(self, tag: str, msg: str):
        self._logger.error("[Statsig::%s] %s", tag, msg)


class OutputLogger:
    """Level-filtering front for whichever provider the session was configured with."""

    def __init__(
        self,
        provider: Optional[OutputLoggerProvider] = None,
        level: Optional[str] = None,
    ):
        self.configure(provider, level)

    def configure(
        self,
        provider: Optional[OutputLoggerProvider] = None,
        level: Optional[str] = None,
    ):
        self.provider = provider or LoggingOutputLoggerProvider()
        self.level = LOG_LEVELS.get(
            (level or DEFAULT_LOG_LEVEL).lower(), LOG_LEVELS[DEFAULT_LOG_LEVEL]
        )

    def init(self):
        self.provider.init()

    def shutdown(self):
        self.provider.shutdown()

    def debug(self, tag: str, msg: str):
        if self.level >= LOG_LEVELS["debug"]:
            self.provider.debug(tag, msg)

    def info(self, tag: str, msg: str):
        if self.level >= LOG_LEVELS["info"]:
            self.provider.info(tag, msg)

    def warn(self, tag: str, msg: str):
        if self.level >= LOG_LEVELS["warn"]:
            self.provider.warn(tag, msg)

    def error(self, tag: str, msg: str):
        if self.level >= LOG_LEVELS["error"]:
            self.provider.error(tag, msg)
