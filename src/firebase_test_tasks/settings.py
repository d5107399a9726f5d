from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import os


DEFAULT_APP_ENV = "development"
DEFAULT_SERVICE_ACCOUNT_PATH = "serviceAccount.json"
DEFAULT_DELETE_BATCH_SIZE = 500
DEFAULT_TASK_SERVER_HOST = "127.0.0.1"
DEFAULT_TASK_SERVER_PORT = 8100


class SettingsError(ValueError):
    """Raised when settings values are invalid."""


@dataclass(frozen=True)
class AppSettings:
    app_env: str
    project_id: str
    firestore_emulator_host: str
    database_emulator_host: str
    database_url: str
    service_account_path: str
    delete_batch_size: int
    task_server_host: str
    task_server_port: int

    @property
    def uses_emulator(self) -> bool:
        return bool(self.firestore_emulator_host or self.database_emulator_host)


def _read_dotenv(dotenv_path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not dotenv_path.exists():
        return values

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if key:
            values[key] = value
    return values


def _get_str(values: Mapping[str, str], key: str, default: str) -> str:
    value = values.get(key, default).strip()
    if not value:
        raise SettingsError(f"{key} must not be empty.")
    return value


def _get_optional_str(values: Mapping[str, str], *keys: str) -> str:
    for key in keys:
        value = values.get(key, "").strip()
        if value:
            return value
    return ""


def _get_int(values: Mapping[str, str], key: str, default: int) -> int:
    raw_value = values.get(key)
    if raw_value is None or raw_value.strip() == "":
        return default
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise SettingsError(f"{key} must be integer: {raw_value}") from exc
    if value <= 0:
        raise SettingsError(f"{key} must be > 0: {value}")
    return value


def _get_host(values: Mapping[str, str], key: str) -> str:
    value = values.get(key, "").strip()
    if not value:
        return ""
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise SettingsError(f"{key} must be in host:port format: {value}")
    return value


def load_settings(
    *,
    env: Mapping[str, str] | None = None,
    dotenv_path: str | Path = ".env",
) -> AppSettings:
    """Load settings from .env and environment variables.

    Priority: OS environment > .env > default.
    """

    env_values = dict(env) if env is not None else dict(os.environ)
    dotenv_values = _read_dotenv(Path(dotenv_path))
    merged: dict[str, str] = {**dotenv_values, **env_values}

    return AppSettings(
        app_env=_get_str(merged, "APP_ENV", DEFAULT_APP_ENV),
        project_id=_get_optional_str(merged, "GCLOUD_PROJECT", "FIREBASE_PROJECT_ID"),
        firestore_emulator_host=_get_host(merged, "FIRESTORE_EMULATOR_HOST"),
        database_emulator_host=_get_host(merged, "FIREBASE_DATABASE_EMULATOR_HOST"),
        database_url=_get_optional_str(merged, "FIREBASE_DATABASE_URL"),
        service_account_path=_get_str(merged, "SERVICE_ACCOUNT_PATH", DEFAULT_SERVICE_ACCOUNT_PATH),
        delete_batch_size=_get_int(merged, "DELETE_BATCH_SIZE", DEFAULT_DELETE_BATCH_SIZE),
        task_server_host=_get_str(merged, "TASK_SERVER_HOST", DEFAULT_TASK_SERVER_HOST),
        task_server_port=_get_int(merged, "TASK_SERVER_PORT", DEFAULT_TASK_SERVER_PORT),
    )
