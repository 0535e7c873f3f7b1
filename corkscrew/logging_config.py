"""Logging setup for Corkscrew.

All loggers live under the ``corkscrew`` namespace so a single call to
``setup_logging`` controls the whole service.
"""

import logging

ROOT_LOGGER = "corkscrew"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the corkscrew logger with a console handler.

    Safe to call more than once; the handler is only attached the first time.
    Unknown level names fall back to INFO.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    resolved = getattr(logging, str(level).upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logger.setLevel(resolved)

    if not any(getattr(h, "_corkscrew", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._corkscrew = True
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger, namespaced under ``corkscrew``."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


_auth_logger = get_logger("corkscrew.auth.events")


def log_auth_event(
    event: str,
    user_id: str | None,
    success: bool,
    reason: str | None = None,
) -> None:
    """Write one line per authentication event (sign_in, sign_up, sign_out, callback)."""
    line = f"{event} | user={user_id or '-'} | success={success}"
    if reason:
        line += f" | reason={reason}"
    if success:
        _auth_logger.info(line)
    else:
        _auth_logger.warning(line)
