"""
Development runner for the redirect-with-error demo app.

Usage:
  NONCE_SECRET_KEY=... HOST=127.0.0.1 PORT=8000 python main.py
"""

from __future__ import annotations

import os

import uvicorn

from app.main import create_app

app = create_app()


def main() -> None:
    config = uvicorn.Config(
        "main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        proxy_headers=True,
    )
    server = uvicorn.Server(config)
    server.run()


if __name__ == "__main__":
    main()
