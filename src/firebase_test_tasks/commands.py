"""Shell command builders for the firebase CLI.

Older test suites drive the stores by shelling out to ``firebase`` /
``firebase-extra`` instead of calling the tasks. These builders render the
same action/path/options/data into that command line. Values are passed
through as-is; placeholders are not decoded here.
"""

from __future__ import annotations

import json
import shlex
from typing import Any, Mapping


FIREBASE_TOOLS_BASE_COMMAND = "npx firebase"
FIREBASE_EXTRA_PATH = "npx firebase-extra"
FIREBASE_TOOLS_YES_ARGUMENT = "-y"

# RTDB query option -> firebase-tools flag.
RTDB_QUERY_FLAGS: dict[str, str] = {
    "orderByChild": "--order-by",
    "orderByKey": "--order-by-key",
    "orderByValue": "--order-by-value",
    "startAt": "--start-at",
    "endAt": "--end-at",
    "equalTo": "--equal-to",
    "limitToFirst": "--limit-to-first",
    "limitToLast": "--limit-to-last",
}
_RTDB_FLAG_ONLY = {"orderByKey", "orderByValue"}
_RTDB_LIMITS = {"limitToFirst", "limitToLast"}


def default_args(
    args: list[str] | None = None,
    *,
    project_id: str = "",
    token: str = "",
    disable_yes: bool = False,
) -> list[str]:
    new_args = list(args or [])
    if project_id and ("-P" not in new_args or project_id not in new_args):
        new_args.extend(["-P", project_id])
    if token and "--token" not in new_args:
        new_args.extend(["--token", token])
    if not disable_yes and FIREBASE_TOOLS_YES_ARGUMENT not in new_args:
        new_args.append(FIREBASE_TOOLS_YES_ARGUMENT)
    return new_args


def args_string(args: list[str]) -> str:
    return f" {' '.join(args)}" if args else ""


def _data_argument(data: Any) -> str:
    if isinstance(data, str):
        # Fixture file path.
        return shlex.quote(data)
    return shlex.quote(json.dumps(data, ensure_ascii=False, separators=(",", ":")))


def _rtdb_query_args(options: Mapping[str, Any]) -> list[str]:
    query_args: list[str] = []
    for option_name, flag in RTDB_QUERY_FLAGS.items():
        value = options.get(option_name)
        if value is None or value is False:
            continue
        if option_name in _RTDB_FLAG_ONLY:
            query_args.append(flag)
        elif option_name in _RTDB_LIMITS:
            query_args.extend([flag, str(1 if value is True else value)])
        else:
            query_args.extend([flag, shlex.quote(str(value))])
    if options.get("limitToLast") and not any(
        options.get(name) for name in ("orderByChild", "orderByKey", "orderByValue")
    ):
        # firebase-tools needs an ordering for limit flags.
        query_args.insert(0, RTDB_QUERY_FLAGS["orderByKey"])
    return query_args


def build_rtdb_command(
    action: str,
    path: str,
    data: Any = None,
    options: Mapping[str, Any] | None = None,
    *,
    project_id: str = "",
    token: str = "",
) -> str:
    options = dict(options or {})
    args = list(options.get("args") or [])
    clean_path = path if path.startswith("/") else f"/{path}"

    if action in {"remove", "delete"}:
        final_args = default_args(args, project_id=project_id, token=token)
        return f"{FIREBASE_TOOLS_BASE_COMMAND} database:remove {clean_path}{args_string(final_args)}"
    if action == "get":
        final_args = _rtdb_query_args(options) + default_args(
            args, project_id=project_id, token=token, disable_yes=True
        )
        return f"{FIREBASE_TOOLS_BASE_COMMAND} database:get {clean_path}{args_string(final_args)}"
    if action in {"set", "update", "push"}:
        final_args = default_args(args, project_id=project_id, token=token)
        command = f"{FIREBASE_TOOLS_BASE_COMMAND} database:{action} {clean_path}"
        if isinstance(data, str):
            return f"{command} {_data_argument(data)}{args_string(final_args)}"
        return f"{command} -d {_data_argument(data)}{args_string(final_args)}"
    raise ValueError(f'Unsupported RTDB action "{action}"')


def build_firestore_command(
    action: str,
    path: str,
    data: Any = None,
    options: Mapping[str, Any] | None = None,
    *,
    project_id: str = "",
    token: str = "",
) -> str:
    options = dict(options or {})
    args = list(options.get("args") or [])

    if action == "delete":
        final_args = default_args(args, project_id=project_id, token=token)
        final_args.append("-r" if options.get("recursive") else "--shallow")
        return f"{FIREBASE_TOOLS_BASE_COMMAND} firestore:delete {path}{args_string(final_args)}"
    if action == "get":
        return f"{FIREBASE_EXTRA_PATH} firestore get {path}"
    if action in {"set", "update", "add"}:
        final_args = default_args(args, project_id=project_id, token=token, disable_yes=True)
        return f"{FIREBASE_EXTRA_PATH} firestore {action} {path} {_data_argument(data)}{args_string(final_args)}"
    raise ValueError(f'Unsupported Firestore action "{action}"')
