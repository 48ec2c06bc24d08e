#!/usr/bin/env python3
"""Start the newsroom API under uvicorn.

    python run.py [--host HOST] [--port PORT] [--reload]

Log level and format come from LOG_LEVEL / LOG_FORMAT, as in the app.
"""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the newsroom workflow service")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "newsroom.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
