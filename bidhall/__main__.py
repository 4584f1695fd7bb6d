"""Run the auction server with uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from .config import get_server_config


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    listen = get_server_config().listen
    uvicorn.run(
        "bidhall.main:app",
        host=str(listen.get("host", "0.0.0.0")),
        port=int(listen.get("port", 3001)),
    )


if __name__ == "__main__":
    main()
