"""
Logging Configuration
Sets up the 'bubblemap' logger and routes Qt's own diagnostics into it.

Qt reports problems (missing fonts, touch devices, offscreen platform
notices) through its message handler rather than through Python logging;
`capture_qt_messages` forwards them to the 'bubblemap.qt' logger so a single
--log-file holds both.
"""
import logging
import os
import sys
from typing import Optional, Union

from PySide6.QtCore import QMessageLogContext, QtMsgType, qInstallMessageHandler

LOGGER_NAME = "bubblemap"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def resolve_level(level: Union[int, str]) -> int:
    """Accept logging constants or their names ('debug', 'WARNING', ...)."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def qt_message_handler(mode: QtMsgType, context: Optional[QMessageLogContext], message: str) -> None:
    logging.getLogger(f"{LOGGER_NAME}.qt").log(_QT_LEVELS.get(mode, logging.WARNING), message)


def capture_qt_messages() -> None:
    qInstallMessageHandler(qt_message_handler)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    capture_qt: bool = True,
) -> logging.Logger:
    """
    Configures the 'bubblemap' namespace logger.

    Args:
        level: Logging level, as a constant or a name.
        log_file: Optional path to append logs to; missing folders are created.
        capture_qt: Forward Qt's qDebug/qWarning output to 'bubblemap.qt'.

    Returns:
        The configured package logger.
    """
    level = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Calling twice (tests, reopened windows) must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        folder = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(folder, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if capture_qt:
        capture_qt_messages()

    logger.info(f"Logging initialized at {logging.getLevelName(level)}.")
    return logger
