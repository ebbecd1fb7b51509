"""
Image Validation and Processing Module

Validates uploaded images to prevent malicious file uploads, re-encodes
them through PIL to strip potential exploits, and stores them as WEBP
under the upload folder.
"""

import logging
import os
import uuid
from io import BytesIO

from PIL import Image
from werkzeug.utils import secure_filename

from constants import ALLOWED_IMAGE_TYPES

logger = logging.getLogger(__name__)

# URL prefix stored images are served from (see the uploads route in app.py)
UPLOAD_URL_PREFIX = '/uploads/'


class ImageValidationError(Exception):
    """Raised when an image fails validation."""
    pass


# Allowed image formats (PIL format names)
ALLOWED_FORMATS = {'JPEG', 'PNG', 'GIF', 'WEBP'}

# Maximum image dimensions (prevent decompression bombs)
MAX_WIDTH = 8000
MAX_HEIGHT = 8000

MAX_FILE_SIZE = 5 * 1024 * 1024

# Stored images are resized down to this width
OUTPUT_WIDTH = 1200
OUTPUT_QUALITY = 80


def read_upload(file_storage, max_size=MAX_FILE_SIZE):
    """
    Read an uploaded file's bytes after checking its declared type and size.

    Args:
        file_storage: werkzeug.datastructures.FileStorage object

    Returns:
        bytes

    Raises:
        ImageValidationError: If the file is missing, too large or not an image type
    """
    if file_storage is None or not file_storage.filename:
        raise ImageValidationError("No file received")

    content_type = (file_storage.mimetype or '').lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ImageValidationError("Invalid file type. Please upload a JPEG, PNG, GIF, or WebP file")

    data = file_storage.read(max_size + 1)
    if len(data) > max_size:
        raise ImageValidationError(f"File size exceeds the {max_size // (1024 * 1024)}MB limit")
    if not data:
        raise ImageValidationError("Uploaded file is empty")
    return data


def open_image(image_data):
    """
    Open and verify image bytes with PIL.

    Raises:
        ImageValidationError: If the data is not a valid, allowed image
    """
    image_buffer = BytesIO(image_data)
    try:
        img = Image.open(image_buffer)
        # Verify it's actually an image (detects corrupted/fake files)
        img.verify()

        # Re-open after verify (verify() leaves file in uncertain state)
        image_buffer.seek(0)
        img = Image.open(image_buffer)
    except Image.DecompressionBombError:
        raise ImageValidationError("Image appears to be a decompression bomb (too large when decoded)")
    except (OSError, SyntaxError, ValueError) as e:
        raise ImageValidationError(f"Invalid or corrupted image: {e}")

    if img.format not in ALLOWED_FORMATS:
        raise ImageValidationError(
            f"Invalid image format: {img.format}. "
            f"Allowed formats: {', '.join(sorted(ALLOWED_FORMATS))}"
        )

    width, height = img.size
    if width > MAX_WIDTH or height > MAX_HEIGHT:
        raise ImageValidationError(
            f"Image dimensions too large: {width}x{height}. "
            f"Maximum: {MAX_WIDTH}x{MAX_HEIGHT}"
        )
    return img


def save_recipe_image(image_data, upload_folder):
    """
    Validate, resize and store an image as WEBP.

    Args:
        image_data: Raw image bytes
        upload_folder: Directory the file is written to

    Returns:
        str: The public URL of the stored image

    Raises:
        ImageValidationError: If the image is invalid or cannot be encoded
    """
    img = open_image(image_data)

    try:
        if img.width > OUTPUT_WIDTH:
            height = max(1, round(img.height * OUTPUT_WIDTH / img.width))
            img = img.resize((OUTPUT_WIDTH, height), Image.Resampling.LANCZOS)

        if img.mode not in ('RGB', 'RGBA'):
            img = img.convert('RGBA' if 'transparency' in img.info or img.mode in ('LA', 'PA') else 'RGB')

        os.makedirs(upload_folder, exist_ok=True)
        filename = f"{uuid.uuid4().hex}.webp"
        img.save(os.path.join(upload_folder, filename), 'WEBP', quality=OUTPUT_QUALITY)
    except (OSError, ValueError) as e:
        raise ImageValidationError(f"Could not process image: {e}")

    logger.info("Stored recipe image %s", filename)
    return UPLOAD_URL_PREFIX + filename


def delete_recipe_image(image_url, upload_folder):
    """
    Delete a stored image given its public URL.

    Returns True if a file was removed. URLs that do not point at the
    upload folder (external images) are left alone.
    """
    if not image_url or not image_url.startswith(UPLOAD_URL_PREFIX):
        logger.debug("Not a stored upload, skipping delete: %s", image_url)
        return False

    filename = secure_filename(image_url[len(UPLOAD_URL_PREFIX):])
    if not filename:
        return False

    path = os.path.join(upload_folder, filename)
    if not os.path.exists(path):
        logger.warning("Image file not found for delete: %s", path)
        return False

    os.remove(path)
    logger.info("Deleted recipe image %s", filename)
    return True
