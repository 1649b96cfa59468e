"""Object store backends that list the contents of a photo bucket.

The Google Cloud Storage backend talks to the bucket through
gcloud-aio-storage. Credentials come from a service account key given as raw
JSON or base64-encoded JSON; without one, Application Default Credentials
are used (GOOGLE_APPLICATION_CREDENTIALS, gcloud auth, metadata server).
"""

import asyncio
import base64
import binascii
import io
import json
import logging
import mimetypes
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from gcloud.aio.storage import Storage

from .errors import ConfigurationError, DataAccessError
from .models import StorageObject, parse_timestamp

logger = logging.getLogger(__name__)

BACKEND_GCS = "gcs"
BACKEND_LOCAL = "local"


class ObjectStore(ABC):
    """Lists every object in a bucket."""

    @abstractmethod
    async def list_objects(self, bucket: str) -> List[StorageObject]:
        """List all objects in a bucket.

        Implementations page through the listing until it is exhausted.

        Raises:
            DataAccessError: If the bucket cannot be listed.
        """
        pass

    async def close(self) -> None:
        """Release any client resources."""
        pass


def decode_service_account_key(raw_key: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode a service account key given as JSON or base64-encoded JSON.

    Returns:
        The parsed key, or None when no key is configured.

    Raises:
        ConfigurationError: If the value is neither valid JSON nor base64 JSON.
    """
    if not raw_key:
        return None
    trimmed = raw_key.strip()
    if not trimmed:
        return None

    json_text = trimmed
    if not (trimmed.startswith("{") and trimmed.endswith("}")):
        try:
            json_text = base64.b64decode(trimmed, validate=True).decode("utf-8")
        except (binascii.Error, ValueError):
            json_text = trimmed

    try:
        credentials = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            "Unable to parse GCP service account credentials; "
            "make sure the JSON is valid or base64 encoded."
        ) from e
    if not isinstance(credentials, dict):
        raise ConfigurationError("GCP service account credentials must be a JSON object.")
    return credentials


def _object_from_gcs_item(item: Dict[str, Any]) -> StorageObject:
    size = item.get("size")
    try:
        size_bytes = int(size) if size is not None else 0
    except (TypeError, ValueError):
        size_bytes = 0
    return StorageObject(
        key=item.get("name", ""),
        size_bytes=size_bytes,
        content_type=item.get("contentType") or None,
        last_modified=parse_timestamp(item.get("updated")),
    )


class GCSObjectStore(ObjectStore):
    """Object store backed by a Google Cloud Storage bucket.

    Attributes:
        credentials: Parsed service account key, or None for default
            credentials.
    """

    def __init__(self, credentials: Optional[Dict[str, Any]] = None):
        self.credentials = credentials
        self._client: Optional[Storage] = None

    def _get_client(self) -> Storage:
        if self._client is None:
            service_file = None
            if self.credentials:
                service_file = io.StringIO(json.dumps(self.credentials))
            self._client = Storage(service_file=service_file)
        return self._client

    async def list_objects(self, bucket: str) -> List[StorageObject]:
        client = self._get_client()
        objects: List[StorageObject] = []
        params: Dict[str, str] = {}
        pages = 0

        try:
            while True:
                response = await client.list_objects(bucket, params=params)
                pages += 1
                for item in response.get("items", []):
                    objects.append(_object_from_gcs_item(item))
                token = response.get("nextPageToken")
                if not token:
                    break
                params = {"pageToken": token}
        except Exception as e:
            message = str(e) or (
                "Unable to load objects from Google Cloud Storage. "
                "Check credentials and permissions."
            )
            raise DataAccessError(message) from e

        logger.info(f"Listed {len(objects)} objects from gs://{bucket} in {pages} page(s)")
        return objects

    async def close(self) -> None:
        """Close the gcloud-aio-storage client session."""
        if self._client is not None:
            await self._client.close()
            self._client = None


class LocalDirectoryStore(ObjectStore):
    """Serves a local directory tree as a set of buckets.

    ``<root>/<bucket>`` is listed as the bucket; keys are paths relative to
    it. Useful for developing against a copy of the photo bucket.
    """

    def __init__(self, root: str):
        self.root = Path(os.path.expanduser(root))

    async def list_objects(self, bucket: str) -> List[StorageObject]:
        return await asyncio.to_thread(self._list_sync, bucket)

    def _list_sync(self, bucket: str) -> List[StorageObject]:
        bucket_dir = self.root / bucket
        if not bucket_dir.is_dir():
            raise DataAccessError(f"Bucket directory not found: {bucket_dir}")

        objects = []
        for dirpath, dirnames, filenames in os.walk(bucket_dir, followlinks=False):
            dirnames.sort()
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                try:
                    stat = path.stat()
                except OSError as e:
                    logger.warning(f"Cannot stat {path}: {e}")
                    continue
                content_type, _ = mimetypes.guess_type(filename)
                objects.append(StorageObject(
                    key=path.relative_to(bucket_dir).as_posix(),
                    size_bytes=stat.st_size,
                    content_type=content_type,
                    last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                ))

        logger.info(f"Listed {len(objects)} objects from {bucket_dir}")
        return objects


def create_object_store(config) -> ObjectStore:
    """Create the object store selected by the configuration.

    Args:
        config: Object with ``storage_backend``, ``credentials_key`` and
            ``local_root`` attributes (see WebConfig).

    Raises:
        ConfigurationError: For unknown backends, a local backend without a
            root directory, or unreadable credentials.
    """
    backend = (config.storage_backend or BACKEND_GCS).lower()

    if backend == BACKEND_GCS:
        return GCSObjectStore(credentials=decode_service_account_key(config.credentials_key))

    if backend == BACKEND_LOCAL:
        if not config.local_root:
            raise ConfigurationError(
                "A local root directory is required for the local storage backend. "
                "Set PORTFOLIO_GALLERY_LOCAL_ROOT or local_root in the config file."
            )
        return LocalDirectoryStore(config.local_root)

    raise ConfigurationError(
        f"Unknown storage backend: {config.storage_backend}. Supported backends: gcs, local"
    )
