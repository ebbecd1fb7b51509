"""
OCR Service

Reads recipe text out of a photo with Google Cloud Vision text
detection and runs it through the recipe text heuristics.
"""

import logging
import time
import uuid

from flask import current_app
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import vision
from google.oauth2 import service_account

from .parsing import parse_recipe_text

logger = logging.getLogger(__name__)

TOKEN_URI = 'https://oauth2.googleapis.com/token'
UNSUPPORTED_FORMAT_MESSAGE = ('The image format appears to be unsupported by Google Cloud Vision API. '
                              'Please try converting the image to JPEG format before uploading.')


class OCRError(Exception):
    """Raised when text cannot be extracted from an image."""

    def __init__(self, message, status=500):
        super().__init__(message)
        self.status = status


def format_private_key(private_key):
    """Repair a private key pasted into an environment variable."""
    key = private_key.strip()
    if key.startswith('"') and key.endswith('"'):
        key = key[1:-1]
    return key.replace('\\n', '\n').replace('\\r', '\r').strip()


def get_vision_client():
    """
    Build a Vision client from the configured credentials.

    An explicit client email + private key pair wins; otherwise the Google
    default credential chain (GOOGLE_APPLICATION_CREDENTIALS, metadata
    server, ...) is used.
    """
    config = current_app.config
    email = config.get('GOOGLE_VISION_CLIENT_EMAIL')
    private_key = config.get('GOOGLE_VISION_PRIVATE_KEY')

    try:
        if email and private_key:
            logger.debug("Creating Vision client with explicit credentials")
            credentials = service_account.Credentials.from_service_account_info({
                'client_email': email,
                'private_key': format_private_key(private_key),
                'token_uri': TOKEN_URI,
            })
            return vision.ImageAnnotatorClient(credentials=credentials)

        if not config.get('GOOGLE_APPLICATION_CREDENTIALS'):
            logger.warning("No explicit Vision credentials configured, trying default Google auth")
        return vision.ImageAnnotatorClient()
    except (auth_exceptions.GoogleAuthError, ValueError) as e:
        logger.error("Failed to initialize Google Cloud Vision client: %s", e)
        raise OCRError('Google Cloud Vision API client failed to initialize. '
                       'Please check your credentials.')


def new_trace_id():
    return f"vision-req-{int(time.time() * 1000)}-{uuid.uuid4().hex[:5]}"


def extract_text(image_bytes, client=None, trace_id=None):
    """
    Run text detection on an image and return the full detected text.

    Raises:
        OCRError: credentials/API failure, unsupported image, or no text found
    """
    trace_id = trace_id or new_trace_id()
    if client is None:
        client = get_vision_client()

    logger.info("Sending image to Vision API [%s] (%d bytes)", trace_id, len(image_bytes))
    try:
        response = client.text_detection(image=vision.Image(content=image_bytes))
    except google_exceptions.GoogleAPICallError as e:
        logger.error("Vision API error [%s]: %s", trace_id, e)
        raise OCRError(_friendly_error(str(e)))

    error_message = getattr(getattr(response, 'error', None), 'message', '')
    if error_message:
        logger.error("Vision API returned an error [%s]: %s", trace_id, error_message)
        raise OCRError(_friendly_error(error_message))

    annotations = list(response.text_annotations or [])
    if not annotations:
        logger.warning("No text detected in the image [%s]", trace_id)
        raise OCRError('No text detected in the image. Please try a clearer photo with visible text.',
                       status=400)

    # The first annotation holds the entire text
    text = annotations[0].description or ''
    if not text.strip():
        raise OCRError('Failed to extract text from image. Please try a different image.', status=400)

    logger.info("Extracted %d characters of text [%s]", len(text), trace_id)
    return text


def _friendly_error(message):
    if 'DECODER' in message or 'unsupported' in message.lower():
        return UNSUPPORTED_FORMAT_MESSAGE
    return f"Failed to extract text from image: Vision API error: {message}"


def image_to_recipe(image_bytes, client=None):
    """
    OCR an image and segment the text into a draft recipe.

    Returns a dict with raw_text, trace_id and recipe.
    """
    trace_id = new_trace_id()
    raw_text = extract_text(image_bytes, client=client, trace_id=trace_id)
    return {
        'raw_text': raw_text,
        'trace_id': trace_id,
        'recipe': parse_recipe_text(raw_text),
    }


def scan_setup_status():
    """Report which Vision credential method is configured."""
    config = current_app.config
    has_explicit = bool(config.get('GOOGLE_VISION_CLIENT_EMAIL') and config.get('GOOGLE_VISION_PRIVATE_KEY'))
    has_file = bool(config.get('GOOGLE_APPLICATION_CREDENTIALS'))

    if has_explicit:
        method, status = 'explicit', 'Using explicit credentials'
    elif has_file:
        method, status = 'file', 'Using credentials file'
    else:
        method, status = None, 'Not configured'

    def presence(key):
        return 'Present' if config.get(key) else 'Missing'

    return {
        'ready': has_explicit or has_file,
        'setupStatus': {
            'googleVision': {
                'configured': has_explicit or has_file,
                'method': method,
                'status': status,
            },
        },
        'environmentVariables': {
            'GOOGLE_VISION_CLIENT_EMAIL': presence('GOOGLE_VISION_CLIENT_EMAIL'),
            'GOOGLE_VISION_PRIVATE_KEY': presence('GOOGLE_VISION_PRIVATE_KEY'),
            'GOOGLE_APPLICATION_CREDENTIALS': presence('GOOGLE_APPLICATION_CREDENTIALS'),
        },
    }
