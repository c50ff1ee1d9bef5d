import logging

import structlog


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
    )
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LoggerFactory:
    def __init__(self, level: str = "INFO", json_output: bool = True):
        setup_logging(level, json_output)

    def create(self, name: str, **context) -> structlog.stdlib.BoundLogger:
        logger = structlog.get_logger(name)
        return logger.bind(**context) if context else logger
