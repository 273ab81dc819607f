"""
Cat API — Cat Photo Storage Service
=====================================

What:  Validates uploaded cat photos, stores them, writes a thumbnail and
       derives the cat's location from the photo's GPS metadata.
How:   Extension and size are checked first; Pillow then decodes the bytes
       (rejecting anything that is not really a PNG/JPEG) and reads the EXIF
       GPS block. The original is written with aiofiles under a UUID name;
       the thumbnail is rendered next to it.
Who:   Called by CatService during POST /cats.

Storage layout (flat, like the /uploads URL space):
    uploads/
    ├── 3f2a9c...e1.jpg          original
    └── 3f2a9c...e1_thumb.png    thumbnail (fits THUMBNAIL_SIZE square)

Location rule:
    EXIF GPSLatitude/GPSLongitude (degrees, minutes, seconds + N/S/E/W refs)
    → decimal (lon, lat). Photos without GPS data fall back to
    settings.default_coordinates.
"""

import asyncio
import io
import logging
import uuid
from pathlib import Path
from typing import NamedTuple, Optional, Sequence, Tuple

import aiofiles
from PIL import ExifTags, Image, UnidentifiedImageError

from catapi.config import settings
from catapi.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

# Pillow format names accepted after decoding
ALLOWED_FORMATS = {"PNG", "JPEG"}

THUMBNAIL_SUFFIX = "_thumb.png"

# Raised by Pillow for undecodable, truncated or oversized images
DECODE_ERRORS = (
    Image.DecompressionBombError,
    UnidentifiedImageError,
    OSError,
    SyntaxError,
    EOFError,
    ValueError,
)


class StoredImage(NamedTuple):
    """Result of a successful upload."""

    filename: str
    path: Path
    thumbnail_path: Path
    coordinates: Tuple[float, float]  # (lon, lat)
    from_gps: bool


def dms_to_decimal(dms: Sequence[float], ref: str) -> float:
    """
    Convert an EXIF degrees/minutes/seconds triple to decimal degrees.

    South latitudes and west longitudes are negative.
    """
    degrees, minutes, seconds = (float(part) for part in dms)
    value = degrees + minutes / 60 + seconds / 3600
    if ref.strip().upper() in ("S", "W"):
        value = -value
    return value


def gps_coordinates(image: Image.Image) -> Optional[Tuple[float, float]]:
    """Read (lon, lat) from an image's EXIF GPS block, or None when absent."""
    gps = image.getexif().get_ifd(ExifTags.IFD.GPSInfo)
    if not gps:
        return None

    lat = gps.get(ExifTags.GPS.GPSLatitude)
    lat_ref = gps.get(ExifTags.GPS.GPSLatitudeRef)
    lon = gps.get(ExifTags.GPS.GPSLongitude)
    lon_ref = gps.get(ExifTags.GPS.GPSLongitudeRef)
    if not (lat and lat_ref and lon and lon_ref):
        return None

    try:
        return dms_to_decimal(lon, lon_ref), dms_to_decimal(lat, lat_ref)
    except (TypeError, ValueError, ZeroDivisionError):
        logger.warning("Ignoring unreadable GPS metadata")
        return None


class ImageService:
    """
    Manages the upload lifecycle of cat photos.

    Lifecycle of an uploaded file:
        1. Extension check (fast, rejects obviously wrong files)
        2. Size check (empty or above MAX_FILE_SIZE)
        3. Decode with Pillow; format must be PNG or JPEG; GPS read
        4. Original written to STORAGE_ROOT with a UUID filename
        5. Thumbnail written next to it
        6. On later failure: cleanup() removes both files
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                         If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("ImageService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="cat",
                context={"extension": ext},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks the Content-Length the client reported and the bytes received.

        Raises:
            ValidationError for empty uploads or uploads over MAX_FILE_SIZE
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="cat")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large: maximum is {max_mb:.0f}MB",
                field="cat",
                context={"reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large: maximum is {max_mb:.0f}MB",
                field="cat",
                context={"actual_size": actual_size},
            )

    def inspect_image(self, content: bytes) -> Optional[Tuple[float, float]]:
        """
        Decode the upload and return its GPS coordinates (None without GPS).

        Raises:
            ValidationError if Pillow cannot decode the bytes or the format
            is not PNG/JPEG.
        """
        try:
            with Image.open(io.BytesIO(content)) as image:
                image_format = image.format
                image.verify()
            # verify() leaves the image unusable and skips JPEG pixel data;
            # reopen and decode fully
            with Image.open(io.BytesIO(content)) as image:
                image.load()
                coordinates = gps_coordinates(image)
        except DECODE_ERRORS as e:
            raise ValidationError(
                message="File content is not a valid image",
                field="cat",
                context={"error": str(e)},
            )

        if image_format not in ALLOWED_FORMATS:
            raise ValidationError(
                message=f"Image format '{image_format}' is not supported",
                field="cat",
                context={"format": image_format},
            )
        return coordinates

    def thumbnail_path_for(self, filename: str) -> Path:
        return self.storage_root / f"{Path(filename).stem}{THUMBNAIL_SUFFIX}"

    def write_thumbnail(self, content: bytes, target: Path) -> None:
        """
        Render a PNG thumbnail fitting the configured square.

        Raises:
            ValidationError if the bytes fail to decode.
            OSError if the thumbnail cannot be written.
        """
        size = settings.thumbnail_size
        with Image.open(io.BytesIO(content)) as image:
            try:
                if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                    image = image.convert("RGB")
                image.thumbnail((size, size))
            except DECODE_ERRORS as e:
                raise ValidationError(
                    message="File content is not a valid image",
                    field="cat",
                    context={"error": str(e)},
                )
            image.save(target, format="PNG")

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, Path]:
        """
        Write validated file content to disk under a fresh UUID name.

        Raises:
            FileStorageError if the file write fails.
        """
        filename = f"{uuid.uuid4().hex}{extension}"
        path = self.storage_root / filename
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )
        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return filename, path

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> StoredImage:
        """
        Complete validation, storage and derivation pipeline.

        Returns:
            StoredImage with the server-assigned filename and the (lon, lat)
            location derived from the photo (or the configured default).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        gps = await asyncio.to_thread(self.inspect_image, content)

        stored_name, path = await self.store_file(content, ext)
        thumbnail = self.thumbnail_path_for(stored_name)
        try:
            await asyncio.to_thread(self.write_thumbnail, content, thumbnail)
        except ValidationError:
            await self.cleanup(path, thumbnail)
            raise
        except OSError as e:
            await self.cleanup(path, thumbnail)
            raise FileStorageError(
                message="Failed to create image thumbnail. Please try again.",
                context={"path": str(thumbnail), "os_error": str(e)},
            )

        if gps is None:
            logger.info("No GPS data in %s; using default coordinates", stored_name)
            coordinates, from_gps = settings.default_coordinates_pair, False
        else:
            coordinates, from_gps = gps, True

        return StoredImage(
            filename=stored_name,
            path=path,
            thumbnail_path=thumbnail,
            coordinates=coordinates,
            from_gps=from_gps,
        )

    async def cleanup(self, *paths: Path) -> None:
        """
        Remove stored files after a failed request.

        Best-effort: missing files are ignored and failures are only logged.
        """
        for path in paths:
            try:
                path.unlink(missing_ok=True)
                logger.info("Cleaned up file: %s", path.name)
            except OSError as e:
                logger.warning("Failed to clean up file %s: %s", path, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
