"""Entry point for running tictacbot via ``python -m tictacbot``."""

from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    """Start the FastAPI-powered tictacbot web server."""

    host = os.environ.get("TICTACBOT_HOST", "0.0.0.0")
    port = int(os.environ.get("TICTACBOT_PORT", "8000"))
    level = os.environ.get("TICTACBOT_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run("tictacbot.ui:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
