"""
Utility functions for uploaded file handling
"""
import base64

from config.settings import ALLOWED_MIME_PREFIX


def is_image_mimetype(mimetype):
    """Return True if the declared MIME type is an image type"""
    return bool(mimetype) and mimetype.lower().startswith(ALLOWED_MIME_PREFIX)


def to_data_uri(buffer, image_format="webp"):
    """Wrap raw bytes in a base64 data URI declaring its own media type"""
    payload = base64.b64encode(buffer).decode("ascii")
    return f"data:image/{image_format};base64,{payload}"
