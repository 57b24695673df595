from __future__ import annotations

import logging
import sys

import structlog


def _coerce_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def service_stamper(service: str):
    """Processor that tags every event with the emitting service."""

    def stamp(_logger, _method_name, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return stamp


def setup_logging(level: str | int = "INFO", service: str = "pansou-gateway") -> None:
    """Configure structlog and the uvicorn access logger for the gateway."""

    logging_level = _coerce_level(level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging_level,
    )

    # uvicorn installs its access handlers before the app starts; give them timestamps
    access_formatter = logging.Formatter(
        "%(asctime)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    access_logger = logging.getLogger("uvicorn.access")
    if access_logger.handlers:
        for handler in access_logger.handlers:
            handler.setFormatter(access_formatter)
            handler.setLevel(logging_level)
    else:
        access_handler = logging.StreamHandler(sys.stdout)
        access_handler.setFormatter(access_formatter)
        access_handler.setLevel(logging_level)
        access_logger.addHandler(access_handler)
    access_logger.setLevel(logging_level)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            service_stamper(service),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    # initial values keep the proxy lazy so setup_logging() still applies
    return structlog.get_logger(name, component=name)


__all__ = ["get_logger", "service_stamper", "setup_logging"]
