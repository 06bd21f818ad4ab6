import logging
import sys
import structlog
from floodline.core.config import settings

# Libraries that are chatty at INFO: httpx logs every feed request,
# sqlalchemy.engine echoes SQL, uvicorn.access logs every hit.
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")


def resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", settings.PROJECT_NAME.lower())
    return event_dict


def setup_logging():
    """
    Configure structured logging for the application.
    - JSON output in production, console rendering everywhere else
    - Events below LOG_LEVEL are dropped before rendering
    - Third-party request/SQL chatter only shows at DEBUG
    """
    level = resolve_level(settings.LOG_LEVEL)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_service,
    ]

    if settings.ENVIRONMENT == "production":
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    noisy_level = logging.DEBUG if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
