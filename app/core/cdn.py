import logging

import cloudinary
import cloudinary.uploader
from app.core.config import settings
from app.core.exceptions import InternalError

logger = logging.getLogger(__name__)

_configured = False

def setup_cloudinary() -> None:
    global _configured
    if _configured:
        return
    if not (settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET):
        raise InternalError("Image storage is not configured")
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )
    _configured = True

def destroy(public_id: str) -> None:
    if public_id:
        setup_cloudinary()
        cloudinary.uploader.destroy(public_id, resource_type="image", invalidate=True)

def upload_image_avatar(file_bytes: bytes, folder: str) -> tuple[str, str]:
    """
    Sube imagen (png/jpg) optimizada y cuadrada (1:1).
    Si la cuenta tiene 'gravity:auto' disponible, centra en el sujeto.
    """
    setup_cloudinary()
    res = cloudinary.uploader.upload(
        file_bytes,
        folder=folder,
        resource_type="image",
        overwrite=True,
        unique_filename=True,
        use_filename=False,
        tags=["member-admin", "avatar"],
        type="upload",
        transformation=[
            {"width": 512, "height": 512, "crop": "fill", "gravity": "auto"},
            {"quality": "auto:good"},
            {"fetch_format": "auto"}
        ],
    )
    logger.info("Uploaded image %s to %s", res["public_id"], folder)
    return res["secure_url"], res["public_id"]
