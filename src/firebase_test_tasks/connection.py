from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
import logging
import os

import firebase_admin
from firebase_admin import credentials, db
from firebase_admin import firestore as admin_firestore
from google.cloud import firestore

from firebase_test_tasks.settings import DEFAULT_DELETE_BATCH_SIZE, AppSettings


LOGGER = logging.getLogger(__name__)
EMULATOR_PROJECT_ID = "test"


@dataclass(frozen=True)
class FirebaseConnection:
    """Store handles shared by every task call.

    Built once by setup code and passed into each dispatcher call.
    """

    app: Any
    firestore_client: Any
    database_emulator_host: str = ""
    default_batch_size: int = DEFAULT_DELETE_BATCH_SIZE

    def firestore(self, app_name: str | None = None) -> Any:
        if not app_name:
            return self.firestore_client
        return admin_firestore.client(app=firebase_admin.get_app(app_name))

    def rtdb_url(self, instance: str | None) -> str | None:
        if not instance:
            return None
        if self.database_emulator_host:
            return f"http://{self.database_emulator_host}?ns={instance}"
        return f"https://{instance}.firebaseio.com"

    def rtdb_reference(self, path: str, *, instance: str | None = None, app_name: str | None = None) -> Any:
        app = firebase_admin.get_app(app_name) if app_name else self.app
        return db.reference(path, app=app, url=self.rtdb_url(instance))


def resolve_database_url(settings: AppSettings, project_id: str) -> str:
    if settings.database_url:
        return settings.database_url
    if settings.database_emulator_host:
        return f"http://{settings.database_emulator_host}?ns={project_id or 'local'}"
    return f"https://{project_id}-default-rtdb.firebaseio.com"


def _load_certificate(settings: AppSettings) -> Any | None:
    service_account = Path(settings.service_account_path)
    if not service_account.exists():
        return None
    return credentials.Certificate(str(service_account))


def _resolve_project_id(settings: AppSettings, certificate: Any | None) -> str:
    if settings.project_id:
        return settings.project_id
    if certificate is not None and certificate.project_id:
        return certificate.project_id
    if settings.uses_emulator:
        return EMULATOR_PROJECT_ID
    raise RuntimeError(
        "project id could not be resolved. Set GCLOUD_PROJECT or provide "
        f"a service account at {settings.service_account_path}."
    )


def create_connection(settings: AppSettings) -> FirebaseConnection:
    """Initialize (or reuse) the default firebase-admin app and a Firestore client."""

    certificate = _load_certificate(settings)
    project_id = _resolve_project_id(settings, certificate)
    database_url = resolve_database_url(settings, project_id)

    if settings.firestore_emulator_host:
        # google-cloud-firestore only reads the emulator host from the process environment.
        os.environ.setdefault("FIRESTORE_EMULATOR_HOST", settings.firestore_emulator_host)
        LOGGER.info("Using Firestore emulator at %s", settings.firestore_emulator_host)
    if settings.database_emulator_host:
        LOGGER.info("Using RTDB emulator with DB URL: %s", database_url)

    try:
        app = firebase_admin.get_app()
    except ValueError:
        app = firebase_admin.initialize_app(
            certificate,
            {"projectId": project_id, "databaseURL": database_url},
        )
        LOGGER.info('Initialized firebase-admin for project "%s"', project_id)

    google_credentials = certificate.get_credential() if certificate is not None else None
    client = firestore.Client(project=project_id, credentials=google_credentials)
    return FirebaseConnection(
        app=app,
        firestore_client=client,
        database_emulator_host=settings.database_emulator_host,
        default_batch_size=settings.delete_batch_size,
    )
