"""Image storage backends."""

from __future__ import annotations

import json
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage
from google.oauth2 import service_account
from loguru import logger

from eidos.config import Settings
from eidos.errors import ConfigurationError, StorageError
from eidos.integrations import ImageStore
from eidos.types import ImageData

DEFAULT_EXTENSION = ".png"
MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}


def extension_for(mime_type: str) -> str:
    return MIME_EXTENSIONS.get(mime_type.strip().lower(), DEFAULT_EXTENSION)


def new_object_name(image: ImageData) -> str:
    """Unguessable object name for one image."""

    return f"{uuid.uuid4()}{extension_for(image.mime_type)}"


class GCSImageStore:
    """Upload images to a Cloud Storage bucket and hand out signed URLs."""

    def __init__(self, bucket: Any, *, signed_url_expiry: int) -> None:
        self.bucket = bucket
        self.signed_url_expiry = signed_url_expiry

    @classmethod
    def from_service_account(
        cls,
        *,
        project_id: str,
        bucket_name: str,
        service_account_key: str,
        signed_url_expiry: int,
    ) -> GCSImageStore:
        try:
            info = json.loads(service_account_key)
            credentials = service_account.Credentials.from_service_account_info(info)
        except (json.JSONDecodeError, ValueError, auth_exceptions.GoogleAuthError) as exc:
            raise ConfigurationError(f"invalid GCS service account key: {exc!s}") from exc

        client = storage.Client(project=project_id, credentials=credentials)
        logger.info("GCS storage ready: project={} bucket={}", project_id, bucket_name)
        return cls(client.bucket(bucket_name), signed_url_expiry=signed_url_expiry)

    def upload(self, image: ImageData) -> str:
        name = new_object_name(image)
        blob = self.bucket.blob(name)
        logger.info(
            "uploading {} ({}KB, {}) to gs://{}",
            name,
            round(len(image.data) / 1024),
            image.mime_type,
            self.bucket.name,
        )
        try:
            blob.upload_from_string(image.data, content_type=image.mime_type)
            url = blob.generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=self.signed_url_expiry),
                method="GET",
            )
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            raise StorageError(f"failed to upload {name}: {exc!s}") from exc

        logger.info("signed URL for {} expires in {} day(s)", name, round(self.signed_url_expiry / 86400))
        return str(url)


class LocalImageStore:
    """Write images into a directory, optionally served under a base URL."""

    def __init__(self, directory: Path, *, base_url: str | None = None) -> None:
        self.directory = directory
        self.base_url = base_url.rstrip("/") if base_url else None

    def upload(self, image: ImageData) -> str:
        name = new_object_name(image)
        target = self.directory / name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(image.data)
        except OSError as exc:
            raise StorageError(f"failed to write {target}: {exc!s}") from exc

        logger.info("stored image at {}", target)
        if self.base_url:
            return f"{self.base_url}/{name}"
        return target.resolve().as_uri()


def create_image_store(settings: Settings) -> ImageStore:
    """Create the configured image store."""

    if settings.storage_backend == "local":
        return LocalImageStore(settings.local_storage_dir, base_url=settings.local_base_url)

    missing = [
        name
        for name, value in (
            ("gcs_project_id", settings.gcs_project_id),
            ("gcs_bucket_name", settings.gcs_bucket_name),
            ("gcs_service_account_key", settings.gcs_service_account_key),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"GCS storage requires: {', '.join(missing)}")
    return GCSImageStore.from_service_account(
        project_id=settings.gcs_project_id or "",
        bucket_name=settings.gcs_bucket_name or "",
        service_account_key=settings.gcs_service_account_key or "",
        signed_url_expiry=settings.signed_url_expiry,
    )
