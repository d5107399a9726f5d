#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from firebase_test_tasks.connection import create_connection
from firebase_test_tasks.options import TaskRequestError
from firebase_test_tasks.settings import load_settings
from firebase_test_tasks.tasks import TASKS, run_task


def _json_argument(value: str | None) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid JSON: {value}") from exc


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one callRtdb / callFirestore task and print the JSON result.")
    parser.add_argument("task", choices=sorted(TASKS))
    parser.add_argument("action", help="get / set / update / push / add / remove / delete")
    parser.add_argument("path", nargs="?", default="", help="Slash-delimited path")
    parser.add_argument("--options", type=_json_argument, default=None, help="Options object as JSON")
    parser.add_argument("--data", type=_json_argument, default=None, help="Data payload as JSON")
    return parser.parse_args(argv)


def build_envelope(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "action": args.action,
        "path": args.path,
        "options": args.options or {},
        "data": args.data,
    }
def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = parse_args(argv)
    connection = create_connection(load_settings())
    try:
        result = run_task(connection, args.task, build_envelope(args))
    except TaskRequestError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except Exception:
        # The dispatcher has logged the store error with its action and path.
        return 1
    print(json.dumps(result, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
