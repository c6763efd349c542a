"""
loguru setup for the assessment API.

Services import the shared `logger`; `init_logging()` runs once from the
application lifespan. Phone numbers are masked in every emitted record, so a
call site that forgets `mask_phone` still cannot write a full number to disk.
"""
import re
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"

# E.164 with '+', or a domestic 010-style mobile number
PHONE_PATTERN = re.compile(r"\+\d{9,15}\b|\b01\d{8,9}\b")


def mask_phone(phone: str) -> str:
    if not phone:
        return "(none)"
    return "*" * max(len(phone) - 4, 0) + phone[-4:]


def redact_phones(record) -> None:
    record["message"] = PHONE_PATTERN.sub(lambda m: mask_phone(m.group(0)), record["message"])


logger.configure(patcher=redact_phones)


def setup_logging(log_dir: Optional[Path] = None, log_level: str = "INFO", app_name: str = "api"):
    """
    Replace every loguru sink with a stderr sink and, when `log_dir` is set,
    a daily file `<app_name>_<date>.log` kept for 30 days.

    Safe to call again: the sink list is swapped, never appended to.
    """
    handlers = [{"sink": sys.stderr, "level": log_level, "format": CONSOLE_FORMAT}]

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append({
            "sink": log_dir / f"{app_name}_{{time:YYYY-MM-DD}}.log",
            "level": log_level,
            "format": FILE_FORMAT,
            "rotation": "00:00",
            "retention": "30 days",
            "compression": "gz",
            "encoding": "utf-8",
        })

    logger.configure(handlers=handlers, patcher=redact_phones)
    if log_dir:
        logger.info(f"Writing {app_name} logs to {log_dir}")


def init_logging(app_name: str = "api"):
    from app.config import get_settings

    settings = get_settings()
    setup_logging(log_dir=settings.LOG_DIR, log_level=settings.LOG_LEVEL, app_name=app_name)


__all__ = ["logger", "setup_logging", "init_logging", "mask_phone"]
