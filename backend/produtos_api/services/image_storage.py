"""
Image Storage Service

Stores uploaded product images as static files.
Every upload is:
- checked for content type and size
- center-cropped to a square ("cover" fit, never letterboxed)
- re-encoded as JPEG
- written under an unguessable filename
"""
import logging
import secrets
import time
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from pathlib import Path, PurePosixPath
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from produtos_api.config import get_settings
from produtos_api.exceptions import InternalError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}

# Defaults, overridable through settings
MAX_IMAGE_BYTES = 5 * 1024 * 1024
IMAGE_SIZE = 400
JPEG_QUALITY = 85


@dataclass
class ImageUpload:
    content: bytes
    content_type: str
    filename: Optional[str] = None


class ImageStorageService:
    """Service for storing and removing product images."""

    def __init__(
        self,
        upload_dir: Path,
        public_prefix: str,
        max_bytes: int = MAX_IMAGE_BYTES,
        size: int = IMAGE_SIZE,
        quality: int = JPEG_QUALITY,
    ):
        self.upload_dir = Path(upload_dir)
        self.public_prefix = public_prefix.rstrip("/")
        self.max_bytes = max_bytes
        self.size = size
        self.quality = quality
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate(self, upload: ImageUpload):
        """Reject uploads by content type and size, before any processing."""
        content_type = (upload.content_type or "").lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "Only image files are allowed (jpeg, png, gif)",
                details={"field": "image", "contentType": upload.content_type},
            )
        if not upload.content:
            raise ValidationError("Image file is empty", details={"field": "image"})
        if len(upload.content) > self.max_bytes:
            raise ValidationError(
                f"Image exceeds the maximum size of {self.max_bytes} bytes",
                details={"field": "image", "size": len(upload.content)},
            )

    def prepare(self, upload: ImageUpload) -> bytes:
        """Validate and normalize an upload without touching the disk."""
        self.validate(upload)
        return self._process(upload.content)

    def store(self, upload: ImageUpload) -> str:
        """
        Validate, normalize and save an uploaded image.

        Returns:
            Public path of the stored file, e.g. /static/uploads/produtos/<name>.jpg
        """
        return self.write(self.prepare(upload), source=upload.filename)

    def write(self, content: bytes, source: Optional[str] = None) -> str:
        """Save bytes already returned by prepare() and return their public path."""
        filename = self._generate_filename()
        try:
            (self.upload_dir / filename).write_bytes(content)
        except OSError as e:
            logger.error(f"Error writing image {filename}: {e}")
            raise InternalError("Could not store image") from e

        logger.info(f"Stored image {filename} from {source or 'upload'} ({len(content)} bytes)")
        return f"{self.public_prefix}/{filename}"

    def delete(self, image_path: Optional[str]):
        """Remove a stored image. Never raises; a missing file is only a warning."""
        if not image_path:
            return

        full_path = self.resolve(image_path)
        if full_path is None:
            logger.warning(f"Refusing to delete image outside upload dir: {image_path}")
            return

        try:
            full_path.unlink()
            logger.info(f"Deleted image {full_path.name}")
        except FileNotFoundError:
            logger.warning(f"Image already gone: {image_path}")
        except OSError as e:
            logger.error(f"Error deleting image {image_path}: {e}")

    def resolve(self, image_path: str) -> Optional[Path]:
        """Map a public image path back to a file in the upload dir."""
        prefix = self.public_prefix + "/"
        if not image_path.startswith(prefix):
            return None

        name = image_path[len(prefix):]
        # Only bare filenames are ever generated
        if not name or PurePosixPath(name).name != name or name in (".", ".."):
            return None
        return self.upload_dir / name

    def _process(self, content: bytes) -> bytes:
        """Center-crop to a square, resize and encode as JPEG."""
        try:
            img = Image.open(BytesIO(content))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError("Uploaded file is not a valid image", details={"field": "image"}) from e

        # Convert to RGB if necessary (for JPEG)
        if img.mode != "RGB":
            img = img.convert("RGB")

        img = ImageOps.fit(img, (self.size, self.size), Image.Resampling.LANCZOS, centering=(0.5, 0.5))

        output = BytesIO()
        img.save(output, format="JPEG", quality=self.quality, optimize=True)
        return output.getvalue()

    def _generate_filename(self) -> str:
        # Millisecond prefix + random suffix, so names are neither sequential nor colliding
        return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}.jpg"


@lru_cache()
def get_image_storage() -> ImageStorageService:
    """Dependency returning the configured image storage."""
    settings = get_settings()
    return ImageStorageService(
        upload_dir=Path(settings.static_dir) / settings.upload_subdir,
        public_prefix=f"{settings.static_url.rstrip('/')}/{settings.upload_subdir.strip('/')}",
        max_bytes=settings.max_image_bytes,
        size=settings.image_size,
        quality=settings.jpeg_quality,
    )
