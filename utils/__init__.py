# Utility modules for Recipe Box
from .url_validator import is_safe_url, safe_fetch, SSRFError
from .image_handler import (
    read_upload, open_image, save_recipe_image, delete_recipe_image, ImageValidationError
)
from .sanitizer import (
    sanitize_text, sanitize_multiline, sanitize_url, sanitize_recipe_name,
    sanitize_instruction, sanitize_ingredient_text
)
