import os
from typing import Optional

from order_service.config.settings import Settings
from order_service.shared.logger import JohnWickLogger

# Settings used when get_logger is called without any; set by configure_logging
_settings: Optional[Settings] = None


def configure_logging(settings: Settings):
    """Make `settings` the source of level and log file for every later get_logger call."""
    global _settings
    _settings = settings


def get_logger(name: Optional[str] = None, settings: Optional[Settings] = None) -> JohnWickLogger:
    """
    Return the JohnWickLogger for `name` (defaults to the app name).
    Level and log file come from `settings`, else the configured settings; loggers are cached per name.
    """
    global _settings
    if settings is None:
        if _settings is None:
            _settings = Settings()
        settings = _settings
    log_file = settings.app.log_file

    # Ensure the log directory exists
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

    return JohnWickLogger(
        name=name or settings.app.app_name,
        log_file=log_file,
        level=settings.app.log_level,
    )
