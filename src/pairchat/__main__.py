"""Entrypoint: python -m pairchat"""
from __future__ import annotations

import logging

import uvicorn

from pairchat.api.middleware.correlation_id import CorrelationIdFilter

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


def main() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        handler.addFilter(CorrelationIdFilter())

    uvicorn.run(
        "pairchat.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info",
        log_config=None,
    )


if __name__ == "__main__":
    main()
