"""Entry point for running XO Arena via ``python -m xoarena``."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    """Start the FastAPI-powered XO Arena web server."""

    host = os.environ.get("XOARENA_HOST", "0.0.0.0")
    port = int(os.environ.get("XOARENA_PORT", "8000"))
    log_level = os.environ.get("XOARENA_LOG_LEVEL", "info").lower()
    uvicorn.run("xoarena.ui:app", host=host, port=port, log_level=log_level, reload=False)


if __name__ == "__main__":
    main()
