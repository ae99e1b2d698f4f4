"""
main.py: Server launcher and entry point.

Run this file to start the allocation API:

    python main.py

API docs are served at http://127.0.0.1:8000/docs

This file does NOT contain application logic. See tier_allocation/main.py for
the FastAPI application and engine wiring.

Direct uvicorn usage:
    uvicorn tier_allocation.main:app --reload
"""

from __future__ import annotations

import uvicorn

from tier_allocation.utils.config import get_settings


def main() -> None:
    """Start the allocation API server."""
    settings = get_settings()
    print("=" * 60)
    print(f"  {settings.app_name} v{settings.app_version}")
    print("=" * 60)
    print(f"  Server  : http://{settings.server_host}:{settings.server_port}")
    print(f"  API docs: http://{settings.server_host}:{settings.server_port}/docs")
    print(f"  Seed    : {settings.seed_path or 'built-in sample data'}")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    uvicorn.run(
        "tier_allocation.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
