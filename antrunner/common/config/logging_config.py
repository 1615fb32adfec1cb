"""Operator-facing logging.

These records describe what antrunner itself did. Output meant for the
person reading a build goes through ``BuildListener`` instead.
"""
import logging
import logging.config
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger


STEP_CONTEXT_FIELDS = ("step_id", "node", "installation")

LOG_FILE_NAME = "antrunner.log"
PLAIN_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
JSON_FIELDS = "%(level)s %(name)s %(message)s"


class StepJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, with the step context as top-level keys."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["source"] = f"{record.module}:{record.lineno}"
        for name in STEP_CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_record[name] = value


def _handler(formatter: str, level: str, log_file: Optional[str] = None) -> Dict[str, Any]:
    if log_file is None:
        return {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "level": level,
            "formatter": formatter,
        }
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "filename": log_file,
        "maxBytes": 10 * 1024 * 1024,
        "backupCount": 5,
        "encoding": "utf-8",
        "level": level,
        "formatter": formatter,
    }


def get_logging_config(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = True,
    log_dir: Optional[str] = None,
) -> Dict[str, Any]:
    formatter = "json" if json_format else "plain"

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_file = str(Path(log_dir) / LOG_FILE_NAME)

    handlers = {"console": _handler(formatter, log_level)}
    if log_file:
        handlers["file"] = _handler(formatter, log_level, log_file)
    names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": PLAIN_FORMAT},
            "json": {"()": StepJsonFormatter, "format": JSON_FIELDS},
        },
        "handlers": handlers,
        "loggers": {
            "antrunner": {"handlers": names, "level": log_level, "propagate": False},
            "aiohttp": {"handlers": names, "level": "WARNING", "propagate": False},
        },
        "root": {"handlers": names, "level": "WARNING"},
    }


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = True,
    log_dir: Optional[str] = None,
) -> None:
    logging.config.dictConfig(
        get_logging_config(
            log_level=log_level,
            log_file=log_file,
            json_format=json_format,
            log_dir=log_dir,
        )
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class StepLoggerAdapter(logging.LoggerAdapter):
    """Stamps the step context on every record. Per-call ``extra`` wins."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def _context(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value}


def get_step_logger(
    step_id: str,
    node_name: Optional[str] = None,
    installation: Optional[str] = None,
) -> StepLoggerAdapter:
    return StepLoggerAdapter(
        get_logger("antrunner.step"),
        _context(step_id=step_id, node=node_name, installation=installation),
    )


def get_installer_logger(
    installation: str,
    node_name: Optional[str] = None,
) -> StepLoggerAdapter:
    return StepLoggerAdapter(
        get_logger("antrunner.installer"),
        _context(installation=installation, node=node_name),
    )
