"""
Image bucket: objects are written under MEDIA_DIR/<bucket>/ and served by
the app at MEDIA_URL/<bucket>/<path>.
"""
import logging
import os
import uuid

from fastapi import UploadFile, HTTPException, status

from app.config import settings

logger = logging.getLogger(__name__)


class ImageBucket:
    """Binary image uploads for product variants."""

    def __init__(self, bucket: str = None, root: str = None, base_url: str = None):
        self.bucket = bucket or settings.IMAGE_BUCKET
        self.root = os.path.join(root or settings.MEDIA_DIR, self.bucket)
        self.base_url = (base_url or settings.MEDIA_URL).rstrip("/")
        os.makedirs(self.root, exist_ok=True)

    def _validate(self, file: UploadFile, content: bytes) -> str:
        if not file.filename or "." not in file.filename:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file name")

        extension = file.filename.rsplit(".", 1)[-1].lower()
        if extension not in settings.ALLOWED_IMAGE_EXTENSIONS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File type not allowed. Use: {', '.join(settings.ALLOWED_IMAGE_EXTENSIONS)}"
            )
        if not content:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File too large. Max: {settings.MAX_UPLOAD_SIZE / (1024 * 1024):.0f}MB"
            )
        return extension

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{self.bucket}/{path}"

    async def upload(self, file: UploadFile, prefix: str) -> dict:
        content = await file.read()
        extension = self._validate(file, content)

        path = f"{prefix}/{uuid.uuid4().hex}.{extension}"
        full_path = os.path.join(self.root, path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as fh:
            fh.write(content)

        logger.info("Stored image %s (%d bytes)", path, len(content))
        return {"path": path, "url": self.public_url(path), "size": len(content)}

    def remove(self, path: str) -> None:
        full_path = os.path.join(self.root, path)
        if os.path.exists(full_path):
            os.remove(full_path)


def get_image_bucket() -> ImageBucket:
    return ImageBucket()
