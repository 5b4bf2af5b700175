"""
Club 6713 Members Portal - entry point
"""
import argparse

import uvicorn

from portal.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Club 6713 members portal")
    parser.add_argument("--host", default=settings.HOST, help="bind address")
    parser.add_argument("--port", type=int, default=settings.PORT, help="bind port")
    parser.add_argument("--reload", action="store_true", help="reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "portal.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
