"""Reusable class mixins"""

from typing import cast

import structlog


class LoggerMixin:
    """Give a class a structlog logger named after its module and class"""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        cls = type(self)
        return cast(
            "structlog.stdlib.BoundLogger",
            structlog.get_logger(f"{cls.__module__}.{cls.__name__}"),
        )
