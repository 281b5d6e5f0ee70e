"""JSON API server entrypoint."""

from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from aiohttp import web
from dotenv import load_dotenv

from reftrends.config import load_settings
from reftrends.shared.logging import setup_logging
from reftrends.web import create_app

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> None:
    if os.environ.get("REFTRENDS_TEST_MODE") != "true":
        load_dotenv()
    settings = load_settings()
    parser = argparse.ArgumentParser(prog="reftrends-web", description="RefTrends JSON API")
    parser.add_argument("--host", default=settings.web.host)
    parser.add_argument("--port", type=int, default=settings.web.port)
    args = parser.parse_args(argv)

    setup_logging(settings.logging)
    logger.info({"web_start": {"host": args.host, "port": args.port}})
    web.run_app(create_app(settings), host=args.host, port=args.port, print=None)


if __name__ == "__main__":
    main()
