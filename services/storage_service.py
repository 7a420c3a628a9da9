"""
Service layer for publishing compressed images to remote storage
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import asyncio
import logging

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from config.settings import (
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
)
from services.image_service import OUTPUT_FORMAT
from utils.file_utils import to_data_uri

logger = logging.getLogger(__name__)

# Status codes for errors the SDK raises instead of returning
CLOUDINARY_STATUS_CODES = {
    "BadRequest": 400,
    "AuthorizationRequired": 401,
    "NotAllowed": 403,
    "NotFound": 404,
    "AlreadyExists": 409,
    "RateLimited": 420,
    "GeneralError": 500,
}
DEFAULT_PUBLISH_STATUS = 502


class PublishError(Exception):
    """The storage collaborator rejected or failed an upload"""

    def __init__(self, message, http_code=DEFAULT_PUBLISH_STATUS):
        super().__init__(message)
        self.message = message
        self.http_code = http_code

    def to_dict(self):
        return {"message": self.message, "http_code": self.http_code}


@dataclass(frozen=True)
class PublishResult:
    url: str
    public_id: str
    raw: dict = field(default_factory=dict, compare=False, repr=False)


class StorageCollaborator(ABC):
    """Remote storage capable of accepting a data URI upload"""

    @abstractmethod
    def upload(self, data_uri, options):
        """Upload the payload and return the collaborator's response dict"""


class CloudinaryStorage(StorageCollaborator):
    def __init__(self, cloud_name=CLOUDINARY_CLOUD_NAME, api_key=CLOUDINARY_API_KEY,
                 api_secret=CLOUDINARY_API_SECRET):
        if not all([cloud_name, api_key, api_secret]):
            raise ValueError("Cloudinary credentials not set in environment variables")
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def upload(self, data_uri, options):
        try:
            result = cloudinary.uploader.upload(data_uri, return_error=True, **options)
        except CloudinaryError as e:
            http_code = CLOUDINARY_STATUS_CODES.get(type(e).__name__, DEFAULT_PUBLISH_STATUS)
            raise PublishError(str(e), http_code=http_code) from e

        # return_error=True hands back the API error with its real HTTP status
        error = result.get("error") if result else None
        if error:
            raise PublishError(
                error.get("message", "Cloudinary upload failed"),
                http_code=error.get("http_code", DEFAULT_PUBLISH_STATUS),
            )
        return result


class PublishService:
    def __init__(self, storage):
        self.storage = storage

    @staticmethod
    def upload_options(namespace):
        """Fixed upload parameters; the collaborator always assigns a fresh name"""
        return {
            "folder": namespace,
            "resource_type": "image",
            "format": OUTPUT_FORMAT,
            "use_filename": False,
            "unique_filename": True,
            "overwrite": False,
        }

    async def publish(self, buffer, namespace):
        """Upload a compressed buffer under the given namespace"""
        data_uri = to_data_uri(buffer, OUTPUT_FORMAT)
        options = self.upload_options(namespace)

        logger.info(f"Uploading {len(buffer)} bytes to folder '{namespace}'")
        result = await asyncio.to_thread(self.storage.upload, data_uri, options)

        url = result.get("secure_url") if result else None
        public_id = result.get("public_id") if result else None
        if not url or not public_id:
            raise PublishError("Storage response is missing secure_url or public_id")

        logger.info(f"Uploaded to {url} (public_id={public_id})")
        return PublishResult(url=url, public_id=public_id, raw=result)
