from flask import Flask, request
from flask_cors import CORS
import logging

from config.settings import (
    ALLOWED_ORIGINS,
    MAX_FILE_SIZE,
    TARGET_BYTES,
    MIN_QUALITY,
    START_QUALITY,
    QUALITY_STEP,
    UPLOAD_FOLDER,
)
from handlers.health_handler import HealthHandler
from handlers.upload_handler import UploadHandler, error_response
from services.image_service import CompressionSettings
from services.storage_service import CloudinaryStorage

logger = logging.getLogger(__name__)


def default_settings():
    return CompressionSettings(
        target_bytes=TARGET_BYTES,
        min_quality=MIN_QUALITY,
        start_quality=START_QUALITY,
        step=QUALITY_STEP,
    )


def create_app(storage=None, settings=None, namespace=UPLOAD_FOLDER, image_service=None):
    """Build the Flask app; storage defaults to Cloudinary"""
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_FILE_SIZE

    CORS(
        app,
        origins=ALLOWED_ORIGINS,
        methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    upload_handler = UploadHandler(
        storage or CloudinaryStorage(),
        settings=settings or default_settings(),
        namespace=namespace,
        image_service=image_service,
    )

    @app.route('/api/upload-image', methods=['POST'])
    async def upload_image():
        return await upload_handler.handle_upload(request)

    @app.route('/api/health')
    def health():
        return HealthHandler.handle_health()

    @app.errorhandler(413)
    def file_too_large(e):
        return error_response(413, "File too large.")

    return app


# Start Flask web server
def run_flask(app, port):
    logger.info(f"Server running on port {port}")
    app.run(host='0.0.0.0', port=port)
