# dental_opinion/intake.py
import base64
import binascii
import logging
import mimetypes
import os
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Advisory only: shown in the UI and reported as warnings, never enforced.
ACCEPTED_MIME_TYPES = ("image/png", "image/jpeg")
ACCEPTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".dcm")
ACCEPT_ATTRIBUTE = "image/png, image/jpeg, .dcm"
MAX_UPLOAD_HINT_BYTES = 10 * 1024 * 1024

DICOM_MIME_TYPE = "application/dicom"
FALLBACK_MIME_TYPE = "application/octet-stream"
PREVIEW_SIZE = (512, 512)


@dataclass(frozen=True)
class ScanFile:
    filename: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def data_b64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")


def resolve_mime_type(filename: str, content_type: Optional[str]) -> str:
    """Declared content type if it is specific, else a guess from the extension."""
    if content_type and content_type != FALLBACK_MIME_TYPE:
        return content_type
    ext = os.path.splitext(filename or "")[1].lower()
    if ext == ".dcm":
        return DICOM_MIME_TYPE
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or FALLBACK_MIME_TYPE


async def read_upload(upload: Optional[UploadFile]) -> Optional[ScanFile]:
    """Read a multipart upload; an empty file field means no file was chosen."""
    if upload is None:
        return None
    data = await upload.read()
    filename = upload.filename or ""
    if not filename and not data:
        return None
    return ScanFile(
        filename=filename or "upload",
        mime_type=resolve_mime_type(filename, upload.content_type),
        data=data,
    )


def advisory_warnings(scan: ScanFile) -> List[str]:
    warnings = []
    ext = os.path.splitext(scan.filename)[1].lower()
    if scan.mime_type not in ACCEPTED_MIME_TYPES and ext not in ACCEPTED_EXTENSIONS:
        warnings.append(f"{scan.filename} is not a PNG, JPG or DICOM file.")
    if scan.size > MAX_UPLOAD_HINT_BYTES:
        warnings.append(f"{scan.filename} is larger than 10MB.")
    return warnings


def encode_image_to_data_url(image_bytes: bytes, mime: str = "image/png") -> str:
    """
    Return a data URL (base64) string for embedding in HTML.
    Example: data:image/png;base64,AAA...
    """
    b64 = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def make_preview(scan: ScanFile) -> Optional[str]:
    """
    Thumbnail of the scan as a PNG data URL.

    Files Pillow cannot decode (DICOM among them) get no preview; that is not an
    error and the scan can still be submitted.
    """
    try:
        with BytesIO(scan.data) as bio:
            img = Image.open(bio)
            img.thumbnail(PREVIEW_SIZE)
            img = img.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.info("No preview for %s (%s): %s", scan.filename, scan.mime_type, e)
        return None

    with BytesIO() as out_bio:
        img.save(out_bio, format="PNG")
        return encode_image_to_data_url(out_bio.getvalue())


def carried_scan(filename: Optional[str], mime_type: Optional[str], data_b64: Optional[str]) -> Optional[ScanFile]:
    """Scan the previous page posted back in its hidden fields, if any."""
    if not data_b64:
        return None
    try:
        data = base64.b64decode(data_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning("Ignoring carried scan %r: %s", filename, e)
        return None
    filename = filename or "upload"
    return ScanFile(filename=filename, mime_type=resolve_mime_type(filename, mime_type), data=data)
