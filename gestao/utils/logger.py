# gestao/utils/logger.py
# Logger da aplicação: console + arquivo rotativo seguro entre processos
# (o agendador de NF-e e o reloader do Flask escrevem no mesmo arquivo).

import logging
import os
import sys
from concurrent_log_handler import ConcurrentRotatingFileHandler
from typing import Optional

APP_LOGGER_NAME = "gestao"
DEFAULT_LEVEL = "DEBUG"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d | %(funcName)s] - %(message)s'

# Bibliotecas HTTP muito verbosas em DEBUG
NOISY_LOGGERS = ("urllib3", "requests")


def _log_directory() -> str:
    default_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs")
    return os.environ.get('LOG_DIRECTORY', default_dir)


def _resolve_level(level_name: Optional[str]) -> int:
    name = (level_name or os.environ.get('LOG_LEVEL') or DEFAULT_LEVEL).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        print(f"Aviso: nível de log '{name}' inválido; usando {DEFAULT_LEVEL}.", file=sys.stderr)
        return logging.DEBUG
    return level


def _file_handler(formatter: logging.Formatter) -> Optional[logging.Handler]:
    directory = _log_directory()
    try:
        os.makedirs(directory, exist_ok=True)
        handler = ConcurrentRotatingFileHandler(
            filename=os.path.join(directory, os.environ.get('LOG_FILENAME', 'app.log')),
            mode='a',
            maxBytes=int(os.environ.get('LOG_MAX_MB', 10)) * 1024 * 1024,
            backupCount=int(os.environ.get('LOG_BACKUP_COUNT', 10)),
            encoding='utf-8',
        )
    except (OSError, ValueError) as e:
        print(f"Log em arquivo desabilitado ({directory}): {e}", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    return handler


class Logger:
    """Singleton que monta os handlers uma única vez e permite trocar o nível depois."""
    _instance = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._logger = None
        return cls._instance

    def __init__(self, log_level: Optional[str] = None):
        if self._logger is not None:
            if log_level is not None:
                self.set_level(log_level)
            return

        self._logger = logging.getLogger(APP_LOGGER_NAME)
        self._logger.propagate = False
        self._logger.setLevel(_resolve_level(log_level))

        formatter = logging.Formatter(LOG_FORMAT)
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        file_handler = _file_handler(formatter)
        if file_handler is not None:
            self._logger.addHandler(file_handler)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    def set_level(self, log_level: str):
        self._logger.setLevel(_resolve_level(log_level))

    def get_logger(self, child: Optional[str] = None) -> logging.Logger:
        return self._logger.getChild(child) if child else self._logger


logger = Logger().get_logger()


def configure_logger(level: str):
    """Troca o nível do logger da aplicação (chamado pelo app factory)."""
    Logger(log_level=level)
