"""Entrypoint: python -m chat_relay"""
from __future__ import annotations

import logging

import uvicorn

from chat_relay.api.middleware.request_id import RequestIdLogFilter
from chat_relay.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s]: %(message)s"


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdLogFilter())
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=[handler])


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "chat_relay.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
    )


if __name__ == "__main__":
    main()
