from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Chatty client libraries; request lines come from app.core.middleware.
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "websockets", "uvicorn.access")


def setup_logging(level: str = "INFO"):
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
            "root": {
                "level": level,
                "handlers": ["console"],
            },
        }
    )
