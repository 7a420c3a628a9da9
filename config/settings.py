# config/settings.py
"""
Configuration settings for the upload service
"""
import os

CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")

PORT = int(os.getenv("PORT", "3000"))

# Configure CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "https://blog-news-admin.netlify.app"
).split(",")

# Cloudinary folder for compressed uploads
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "janta-times-uploads")

# Configure allowed file types
ALLOWED_MIME_PREFIX = "image/"
UPLOAD_FIELD_NAME = "image"

# Configure maximum file sizes (in bytes)
MAX_FILE_SIZE = 25 * 1024 * 1024  # 25MB

# Configure compression
TARGET_BYTES = int(os.getenv("TARGET_BYTES", 100 * 1024))
MIN_QUALITY = int(os.getenv("MIN_QUALITY", 20))
START_QUALITY = int(os.getenv("START_QUALITY", 90))
QUALITY_STEP = int(os.getenv("QUALITY_STEP", 8))

# Configure logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
