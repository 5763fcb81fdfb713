"""
ContactRecall - keyword-routed contact memory over HTTP.

Run with: python server.py  (or: uvicorn app.main:app)
"""

import logging

import uvicorn

import core.config as config
from app.main import app


def main() -> None:
    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level=logging.getLevelName(logging.getLogger().level).lower(),
    )


if __name__ == "__main__":
    main()
