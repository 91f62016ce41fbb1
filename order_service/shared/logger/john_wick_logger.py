import inspect
import logging
import os
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

import structlog


class JohnWickLogger:
    """Named structlog logger writing colored console lines and, optionally, JSON lines to a file."""

    # Keyed by (name, level, log_file)
    _logger_cache: Dict[Tuple[str, str, Optional[str]], "JohnWickLogger"] = {}

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",     # cyan
        "INFO": "\033[32m",      # green
        "WARNING": "\033[33m",   # yellow
        "ERROR": "\033[31m",     # red
        "CRITICAL": "\033[1;31m" # bold red
    }
    RESET_COLOR = "\033[0m"

    def __init__(
        self,
        name: str = "order-service",
        log_file: Optional[str] = None,
        level: str = "INFO",
        context: Optional[dict] = None,
    ):
        self.name = name
        self.context = context or {}

        cache_key = (name, level.upper(), log_file)
        cached = self._logger_cache.get(cache_key)
        if cached is not None and not self.context:
            self.console_logger = cached.console_logger
            self.file_logger = cached.file_logger
            return

        log_level = getattr(logging, level.upper(), logging.INFO)

        # ----------------------------
        # Caller lookup (skips structlog and this module)
        # ----------------------------
        def add_caller_stack(logger, method_name, event_dict):
            frame = inspect.currentframe()
            while frame:
                module_name = frame.f_globals.get("__name__")
                if module_name and not module_name.startswith("structlog") and not module_name.endswith("john_wick_logger"):
                    event_dict["module"] = module_name
                    event_dict["function"] = frame.f_code.co_name
                    event_dict["lineno"] = frame.f_lineno
                    instance = frame.f_locals.get("self")
                    if instance is not None:
                        event_dict["class"] = instance.__class__.__name__
                    break
                frame = frame.f_back
            return event_dict

        # ----------------------------
        # Console renderer
        # ----------------------------
        def console_processor(logger, method_name, event_dict):
            ts = event_dict.pop("timestamp", None) or datetime.now(timezone.utc).isoformat()
            level_name = event_dict.pop("level", method_name).upper()
            logger_name = event_dict.pop("logger", self.name)
            msg = event_dict.pop("event", "")

            caller = ""
            # Only show caller info for WARNING and above
            if level_name in ("WARNING", "ERROR", "CRITICAL"):
                module = event_dict.get("module", "")
                func = event_dict.get("function", "")
                lineno = event_dict.get("lineno", "")
                caller = f" ({module}.{func}:{lineno})" if module and func else ""

            extra = event_dict.get("extra")
            details = f" {extra}" if extra else ""
            color = self.LEVEL_COLORS.get(level_name, "")
            return f"{color}{ts} [{logger_name}] {level_name}: {msg}{details}{caller}{self.RESET_COLOR}"

        console_logger = logging.getLogger(f"{name}.console")
        console_logger.setLevel(log_level)
        console_logger.propagate = False
        if not console_logger.handlers:
            ch = logging.StreamHandler()
            ch.setFormatter(logging.Formatter("%(message)s"))
            console_logger.addHandler(ch)

        self.console_logger = structlog.wrap_logger(
            console_logger,
            processors=[
                structlog.processors.TimeStamper(fmt="ISO"),
                structlog.stdlib.add_log_level,
                add_caller_stack,
                structlog.processors.format_exc_info,
                console_processor,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        ).bind(logger=name, **self.context)

        # ----------------------------
        # JSON file logger (only when a file is configured)
        # ----------------------------
        self.file_logger = None
        if log_file:
            file_logger = logging.getLogger(f"{name}.file")
            file_logger.setLevel(log_level)
            file_logger.propagate = False
            log_path = os.path.abspath(log_file)
            for h in list(file_logger.handlers):
                if isinstance(h, logging.FileHandler) and h.baseFilename != log_path:
                    file_logger.removeHandler(h)
                    h.close()
            if not any(getattr(h, "baseFilename", None) == log_path for h in file_logger.handlers):
                fh = logging.FileHandler(log_file, encoding="utf-8")
                fh.setFormatter(logging.Formatter("%(message)s"))
                file_logger.addHandler(fh)

            self.file_logger = structlog.wrap_logger(
                file_logger,
                processors=[
                    structlog.processors.TimeStamper(fmt="ISO"),
                    structlog.stdlib.add_log_level,
                    structlog.processors.StackInfoRenderer(),
                    structlog.processors.format_exc_info,
                    add_caller_stack,
                    structlog.processors.UnicodeDecoder(),
                    structlog.processors.JSONRenderer(default=str),
                ],
                wrapper_class=structlog.stdlib.BoundLogger,
                cache_logger_on_first_use=True,
            ).bind(logger=name, **self.context)

        if not self.context:
            self._logger_cache[cache_key] = self

    def _emit(self, method: str, msg: str, **extra):
        getattr(self.console_logger, method)(msg, **extra)
        if self.file_logger is not None:
            getattr(self.file_logger, method)(msg, **extra)

    # ----------------------------
    # Logging methods
    # ----------------------------
    def debug(self, msg: str, **extra):
        self._emit("debug", msg, **extra)

    def info(self, msg: str, **extra):
        self._emit("info", msg, **extra)

    def warning(self, msg: str, **extra):
        self._emit("warning", msg, **extra)

    def error(self, msg: str, **extra):
        self._emit("error", msg, **extra)

    def critical(self, msg: str, **extra):
        self._emit("critical", msg, **extra)

    def exception(self, msg: str, **extra):
        self._emit("exception", msg, **extra)
