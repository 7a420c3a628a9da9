"""
Handler for image upload requests
"""
from flask import jsonify
from werkzeug.exceptions import RequestEntityTooLarge
import logging

from config.settings import UPLOAD_FIELD_NAME, UPLOAD_FOLDER
from services.image_service import ImageService, CompressionSettings, DecodeError, OUTPUT_FORMAT
from services.storage_service import PublishService, PublishError
from utils.file_utils import is_image_mimetype

logger = logging.getLogger(__name__)

MESSAGE_TARGET_REACHED = "Image processed & uploaded successfully (target size reached)."
MESSAGE_BEST_EFFORT = "Image processed & uploaded (best-effort, target size not fully reached)."


def error_response(status, message, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


class UploadHandler:
    def __init__(self, storage, settings=None, namespace=UPLOAD_FOLDER, image_service=None):
        self.image_service = image_service or ImageService()
        self.publish_service = PublishService(storage)
        self.settings = settings or CompressionSettings()
        self.namespace = namespace

    async def handle_upload(self, request):
        """Handle POST /api/upload-image"""
        try:
            upload = request.files.get(UPLOAD_FIELD_NAME)
            if upload is None or not upload.filename:
                return error_response(400, f'No file uploaded. Field name should be "{UPLOAD_FIELD_NAME}".')

            if not is_image_mimetype(upload.mimetype):
                logger.warning(f"Rejected upload with MIME type {upload.mimetype!r}")
                return error_response(400, "Only image files are allowed")

            image_bytes = upload.read()
            if not image_bytes:
                return error_response(400, f'No file uploaded. Field name should be "{UPLOAD_FIELD_NAME}".')

            logger.info(f"Received {upload.filename!r} ({len(image_bytes)} bytes)")
            result = self.image_service.compress(image_bytes, self.settings)
            published = await self.publish_service.publish(result.buffer, self.namespace)

            return jsonify({
                "success": True,
                "message": MESSAGE_TARGET_REACHED if result.target_reached else MESSAGE_BEST_EFFORT,
                "url": published.url,
                "public_id": published.public_id,
                "bytes": result.size,
                "format": OUTPUT_FORMAT,
                "qualityUsed": result.quality_used,
            }), 200

        except RequestEntityTooLarge:
            return error_response(413, "File too large.")

        except DecodeError as e:
            logger.error(f"Error decoding upload: {e}")
            return error_response(400, "Uploaded file is not a readable image.", error=str(e))

        except PublishError as e:
            logger.error(f"Upload error: {e}")
            return error_response(e.http_code, "Cloudinary upload failed.", details=e.to_dict())

        except Exception as e:
            logger.error(f"Upload error: {e}")
            return error_response(
                500,
                "Internal server error during image processing/upload.",
                error=str(e),
            )
