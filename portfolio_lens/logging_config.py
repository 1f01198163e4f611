"""
Portfolio Lens Logging Configuration
====================================

Handlers live on the ``portfolio_lens`` package logger only; modules log
through ``logging.getLogger(__name__)`` and inherit them. Named presets
bundle the settings used for development, production and test runs, and
the ``logging`` section of the configuration file can select one.
"""

import logging
import sys
from typing import Any, Dict, Mapping, Optional

ROOT_LOGGER_NAME = "portfolio_lens"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SHORT_FORMAT = "%(name)s - %(levelname)s - %(message)s"

PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {
        "level": "DEBUG",
        "format_string": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
    },
    "production": {
        "level": "INFO",
        "file_handler": "portfolio_lens.log",
    },
    "testing": {
        "level": "WARNING",
        "include_timestamp": False,
    },
}


def configure_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    include_timestamp: bool = True,
    file_handler: Optional[str] = None
) -> logging.Logger:
    """
    Attach fresh handlers to the package logger.

    Parameters
    ----------
    level : str, default "INFO"
        Level name applied to the logger and its handlers
    format_string : str, optional
        Record format; the timestamped or short default when omitted
    include_timestamp : bool, default True
        Choose the timestamped default format
    file_handler : str, optional
        Also write records to this file

    Returns
    -------
    logging.Logger
        The ``portfolio_lens`` logger

    Raises
    ------
    ValueError
        If ``level`` is not a logging level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level: {level}")

    formatter = logging.Formatter(format_string or (DEFAULT_FORMAT if include_timestamp else SHORT_FORMAT))
    handlers = [logging.StreamHandler(sys.stdout)]
    if file_handler:
        handlers.append(logging.FileHandler(file_handler))

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    # Reconfiguring must not duplicate output
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` nested under the package logger."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_preset(name: str, **overrides) -> logging.Logger:
    """
    Apply a named preset from ``PRESETS``.

    Keyword arguments of ``configure_logging`` override the preset's values.
    """
    try:
        options = dict(PRESETS[name])
    except KeyError:
        raise ValueError(f"Unknown logging preset '{name}'. Expected one of: {', '.join(PRESETS)}") from None
    options.update({k: v for k, v in overrides.items() if v is not None})
    return configure_logging(**options)


def configure_from_settings(settings: Mapping[str, Any]) -> logging.Logger:
    """
    Apply the ``logging`` section of a ConfigurationService dictionary.

    Recognised keys are ``preset``, ``level``, ``format`` and ``file``;
    explicit keys take precedence over the preset.
    """
    overrides = {
        "level": settings.get("level"),
        "format_string": settings.get("format"),
        "file_handler": settings.get("file"),
    }
    preset = settings.get("preset")
    if preset:
        return configure_preset(preset, **overrides)
    return configure_logging(**{k: v for k, v in overrides.items() if v is not None})
