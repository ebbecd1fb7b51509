"""
JSON API

Thin handlers over the service layer. Errors are returned as
{"error": message} with a matching status code.
"""

import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from constants import DEFAULT_TIER
from models import db, Recipe
from services import (
    scrape_recipe, image_to_recipe, scan_setup_status, delete_recipe, search_users,
    update_tier, set_admin_role, backfill_recipe_visibility, effective_recipe_visibility,
    get_user_recipes, can_view_recipe,
    ScrapeError, OCRError, RecipeError, UserError,
)
from services.ocr import new_trace_id
from utils import read_upload, save_recipe_image, delete_recipe_image, ImageValidationError
from . import admin_secret_ok

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)


def json_error(message, status):
    return jsonify({'error': message}), status


def api_login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            return json_error('Authentication required', 401)
        return view(*args, **kwargs)
    return wrapped


def _json_body():
    return request.get_json(silent=True) or {}


# ============================================
# IMPORT
# ============================================

@api_bp.route('/scrape-recipe', methods=['POST'])
@api_login_required
def api_scrape_recipe():
    url = _json_body().get('url')
    if not url:
        return json_error('URL is required', 400)
    try:
        recipe = scrape_recipe(url)
    except ScrapeError as e:
        logger.info("Scrape of %s failed: %s", url, e)
        return json_error(str(e), 500)

    return jsonify({
        'name': recipe['name'],
        'servings': recipe['servings'],
        'prepTime': recipe['prep_time'],
        'cookTime': recipe['cook_time'],
        'ingredients': recipe['ingredients'],
        'instructions': recipe['instructions'],
        'imageUrl': recipe['image_url'],
        'categories': recipe['categories'],
        'sourceUrl': recipe['source_url'],
        'sourceName': recipe['source_name'],
    })


@api_bp.route('/vision-to-recipe', methods=['POST'])
@api_login_required
def api_vision_to_recipe():
    try:
        image_bytes = read_upload(request.files.get('file'))
    except ImageValidationError as e:
        return json_error(str(e), 400)

    try:
        result = image_to_recipe(image_bytes)
    except OCRError as e:
        return jsonify({'error': str(e), 'traceId': new_trace_id()}), e.status

    parsed = result['recipe']
    return jsonify({
        'rawText': result['raw_text'],
        'traceId': result['trace_id'],
        'recipe': {
            'name': parsed['name'],
            'servings': parsed['servings'],
            'prepTime': parsed['prep_time'],
            'cookTime': parsed['cook_time'],
            'ingredients': [
                {'amount': i['amount'], 'unit': i['unit'], 'item': i['item'], 'groupName': i['group_name']}
                for i in parsed['ingredients']
            ],
            'instructions': parsed['instructions'],
        },
    })


@api_bp.route('/check-recipe-scan-setup', methods=['GET'])
def api_check_recipe_scan_setup():
    return jsonify(scan_setup_status())


# ============================================
# IMAGES
# ============================================

@api_bp.route('/upload-image', methods=['POST'])
@api_login_required
def api_upload_image():
    try:
        image_bytes = read_upload(request.files.get('file'))
        image_url = save_recipe_image(image_bytes, current_app.config['UPLOAD_FOLDER'])
    except ImageValidationError as e:
        return json_error(str(e), 400)
    return jsonify({'imageUrl': image_url})


@api_bp.route('/delete-image', methods=['POST'])
@api_login_required
def api_delete_image():
    image_url = _json_body().get('imageUrl')
    if not image_url:
        return json_error('No image URL provided', 400)

    # Only images not attached to someone else's recipe may be removed
    in_use = Recipe.query.filter(Recipe.image_url == image_url, Recipe.user_id != current_user.id).first()
    if in_use:
        return json_error('Image is in use by another recipe', 403)

    try:
        deleted = delete_recipe_image(image_url, current_app.config['UPLOAD_FOLDER'])
    except OSError:
        logger.exception("Error deleting image %s", image_url)
        return json_error('Failed to delete image', 500)
    return jsonify({'success': deleted})


# ============================================
# RECIPES
# ============================================

@api_bp.route('/recipes', methods=['GET'])
@api_login_required
def api_recipes():
    after_id = request.args.get('after', type=int)
    limit = max(1, min(request.args.get('limit', 20, type=int), 100))
    recipes, last_id = get_user_recipes(current_user.id, limit=limit, after_id=after_id)
    return jsonify({'recipes': [r.to_dict() for r in recipes], 'lastId': last_id})


@api_bp.route('/recipes/delete', methods=['DELETE'])
@api_login_required
def api_recipe_delete():
    recipe_id = _json_body().get('recipeId')
    if not recipe_id:
        return json_error('Recipe ID is required', 400)
    try:
        delete_recipe(int(recipe_id), current_user)
    except (TypeError, ValueError):
        return json_error('Recipe not found', 404)
    except RecipeError as e:
        message = 'Unauthorized to delete this recipe' if e.status == 403 else str(e)
        return json_error(message, e.status)
    return jsonify({'message': 'Recipe deleted successfully'})


# ============================================
# USERS
# ============================================

@api_bp.route('/users/search', methods=['GET'])
def api_users_search():
    viewer = current_user if current_user.is_authenticated else None
    users = search_users(request.args.get('q', ''), viewer)
    return jsonify([
        {'id': u.id, 'email': u.email, 'displayName': u.display_name, 'photoURL': u.photo_url}
        for u in users
    ])


@api_bp.route('/users/update-tier', methods=['PUT'])
@api_login_required
def api_update_tier():
    body = _json_body()
    user_id = body.get('userId')
    tier = body.get('tier') or DEFAULT_TIER
    if not user_id:
        return json_error('User ID is required', 400)
    if str(user_id) != str(current_user.id) and not current_user.is_admin:
        return json_error('You can only change your own tier', 403)

    try:
        user = update_tier(user_id, tier)
    except UserError as e:
        return json_error(str(e), e.status)
    return jsonify({'success': True, 'message': f'User tier updated to {user.tier}'})


# ============================================
# ADMIN
# ============================================

@api_bp.route('/admin/migrate-recipe-visibility', methods=['GET'])
def api_migrate_recipe_visibility():
    if not admin_secret_ok(request.args.get('secret')):
        return json_error('Unauthorized. Invalid or missing secret key.', 401)

    migrated = backfill_recipe_visibility()
    if not migrated:
        return jsonify({'message': 'No recipes needed migration', 'migratedCount': 0})
    return jsonify({'message': f'Successfully migrated {migrated} recipes', 'migratedCount': migrated})


@api_bp.route('/admin/set-admin-role', methods=['POST'])
def api_set_admin_role():
    body = _json_body()
    user_id = body.get('userId')
    if not user_id:
        return json_error('User ID is required', 400)
    if not admin_secret_ok(body.get('secret')):
        return json_error('Unauthorized', 401)

    try:
        user = set_admin_role(user_id)
    except UserError as e:
        return json_error(str(e), e.status)
    return jsonify({'success': True, 'message': f'User {user.id} has been set as an admin'})


@api_bp.route('/admin/check-recipe', methods=['GET'])
def api_check_recipe():
    if not admin_secret_ok(request.args.get('secret')):
        return json_error('Unauthorized', 401)

    recipe_id = request.args.get('id', type=int)
    if not recipe_id:
        return json_error('Recipe ID is required', 400)
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None:
        return json_error('Recipe not found', 404)

    return jsonify({
        'id': recipe.id,
        'name': recipe.name,
        'userId': recipe.user_id,
        'visibility': recipe.visibility,
        'effectiveVisibility': effective_recipe_visibility(recipe),
        'publiclyVisible': can_view_recipe(recipe, None),
    })
