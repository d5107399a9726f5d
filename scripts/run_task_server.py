#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging

import uvicorn

from firebase_test_tasks.api.app import create_app
from firebase_test_tasks.connection import create_connection
from firebase_test_tasks.settings import load_settings


LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the callRtdb / callFirestore task server for E2E tests.")
    parser.add_argument("--host", default=None, help="Bind host. Default: TASK_SERVER_HOST")
    parser.add_argument("--port", type=int, default=None, help="Bind port. Default: TASK_SERVER_PORT")
    parser.add_argument("--log-level", default="info")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = parse_args(argv)
    settings = load_settings()
    connection = create_connection(settings)
    host = args.host or settings.task_server_host
    port = args.port or settings.task_server_port

    LOGGER.info("タスクサーバー起動: http://%s:%s/api/v1/tasks", host, port)
    uvicorn.run(create_app(connection=connection), host=host, port=port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
