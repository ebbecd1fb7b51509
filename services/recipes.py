"""
Recipe Service

Create, update, delete and list recipes. Ownership and tier limits are
enforced here; read visibility lives in services.visibility.
"""

import logging

from flask import current_app
from sqlalchemy import or_

from constants import VALID_RECIPE_VISIBILITIES, MAX_LENGTHS
from models import db, Recipe, RecipeIngredient, RecipeInstruction, SharedRecipe, Friendship, Follow
from utils import (
    delete_recipe_image, sanitize_text, sanitize_url, sanitize_ingredient_text, sanitize_instruction,
)
from .notifications import delete_notifications_for
from .tiers import check_limit

logger = logging.getLogger(__name__)


class RecipeError(Exception):
    """Raised for invalid recipe data or a recipe the user does not own."""

    def __init__(self, message, status=400):
        super().__init__(message)
        self.status = status


def _clean_ingredients(ingredients):
    rows = []
    for ing in ingredients or []:
        if isinstance(ing, str):
            ing = {'item': ing}
        amount = sanitize_ingredient_text(ing.get('amount'), max_length=50)
        unit = sanitize_ingredient_text(ing.get('unit'), max_length=30)
        item = sanitize_ingredient_text(ing.get('item'))
        if not item and not amount:
            continue
        group = ing.get('group_name', ing.get('groupName'))
        rows.append(RecipeIngredient(
            position=len(rows), amount=amount, unit=unit, item=item,
            group_name=sanitize_text(group, max_length=100),
        ))
    return rows


def _clean_instructions(instructions):
    rows = []
    for step in instructions or []:
        if isinstance(step, str):
            step = {'text': step}
        text = sanitize_instruction(step.get('text'))
        if not text:
            continue
        group = step.get('group_name', step.get('groupName'))
        rows.append(RecipeInstruction(
            position=len(rows), text=text, group_name=sanitize_text(group, max_length=100),
        ))
    return rows


def _clean_categories(categories):
    cleaned = []
    for category in categories or []:
        category = sanitize_text(category, max_length=MAX_LENGTHS['category'])
        if category and category not in cleaned:
            cleaned.append(category)
    return cleaned


def _apply(recipe, data):
    """Copy validated fields from data onto recipe. Missing keys are left alone."""
    if 'name' in data:
        name = sanitize_text(data.get('name'), max_length=MAX_LENGTHS['recipe_name'])
        if not name:
            raise RecipeError('Recipe name is required')
        recipe.name = name

    for field in ('servings', 'prep_time', 'cook_time'):
        if field in data:
            setattr(recipe, field, sanitize_text(data.get(field), max_length=50))

    if 'visibility' in data:
        visibility = data.get('visibility') or None
        if visibility is not None and visibility not in VALID_RECIPE_VISIBILITIES:
            raise RecipeError(f'Invalid visibility: {visibility}')
        recipe.visibility = visibility

    if 'categories' in data:
        recipe.categories = _clean_categories(data.get('categories'))
    if 'image_url' in data:
        recipe.image_url = sanitize_url(data.get('image_url'))
    if 'source_url' in data:
        recipe.source_url = sanitize_url(data.get('source_url'))
    if 'source_name' in data:
        recipe.source_name = sanitize_text(data.get('source_name'), max_length=200)
    if 'last_scraped' in data:
        recipe.last_scraped = data.get('last_scraped')

    if 'ingredients' in data:
        recipe.ingredients = _clean_ingredients(data.get('ingredients'))
    if 'instructions' in data:
        recipe.instructions = _clean_instructions(data.get('instructions'))


def get_user_recipe_count(user_id):
    return Recipe.query.filter_by(user_id=user_id).count()


def create_recipe(user, data, commit=True):
    """
    Create a recipe owned by user.

    data keys: name (required), servings, prep_time, cook_time,
    ingredients [{amount, unit, item, group_name}], instructions
    [str or {text, group_name}], categories, image_url, source_url,
    source_name, last_scraped, visibility.

    Raises:
        RecipeError: missing name or invalid values
        TierLimitError: the user's recipe storage limit is reached
    """
    check_limit(user.tier, 'max_recipes', get_user_recipe_count(user.id))

    data = dict(data)
    data.setdefault('name', '')
    recipe = Recipe(user_id=user.id, categories=[])
    _apply(recipe, data)
    if 'visibility' not in data:
        recipe.visibility = user.recipe_visibility

    db.session.add(recipe)
    if commit:
        db.session.commit()
        logger.info("User %s created recipe %s", user.id, recipe.id)
    return recipe


def get_owned_recipe(recipe_id, user):
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None:
        raise RecipeError('Recipe not found', status=404)
    if recipe.user_id != user.id:
        raise RecipeError('You do not have permission to modify this recipe', status=403)
    return recipe


def update_recipe(recipe_id, user, data):
    """Owner-only update. Ingredients and instructions are replaced wholesale."""
    recipe = get_owned_recipe(recipe_id, user)
    _apply(recipe, data)
    db.session.commit()
    logger.info("User %s updated recipe %s", user.id, recipe.id)
    return recipe


def delete_recipe(recipe_id, user):
    """
    Owner-only delete. Pending shares of the recipe go with it; the stored
    image is removed, and failures to remove it are logged and ignored.
    """
    recipe = get_owned_recipe(recipe_id, user)
    image_url = recipe.image_url

    for share in SharedRecipe.query.filter_by(recipe_id=recipe.id).all():
        delete_notifications_for('recipe_share', share.id, commit=False)
        db.session.delete(share)

    db.session.delete(recipe)
    db.session.commit()
    logger.info("User %s deleted recipe %s", user.id, recipe_id)

    if image_url and not _image_in_use(image_url):
        try:
            delete_recipe_image(image_url, current_app.config['UPLOAD_FOLDER'])
        except OSError:
            logger.exception("Error deleting image for recipe %s", recipe_id)
    return True


def _image_in_use(image_url):
    # Accepted shares copy the image URL rather than the file
    return Recipe.query.filter_by(image_url=image_url).first() is not None


def copy_recipe(recipe, new_owner, commit=True):
    """Copy recipe into new_owner's collection, recording who created it."""
    creator = recipe.owner
    data = {
        'name': recipe.name,
        'servings': recipe.servings,
        'prep_time': recipe.prep_time,
        'cook_time': recipe.cook_time,
        'categories': list(recipe.categories or []),
        'image_url': recipe.image_url,
        'source_url': recipe.source_url,
        'source_name': recipe.source_name,
        'ingredients': [ri.to_dict() for ri in recipe.ingredients],
        'instructions': [{'text': s.text, 'group_name': s.group_name} for s in recipe.instructions],
    }
    copy = create_recipe(new_owner, data, commit=False)
    copy.original_creator_id = recipe.original_creator_id or recipe.user_id
    copy.original_creator_name = recipe.original_creator_name or (creator.name if creator else None)
    if commit:
        db.session.commit()
    return copy


def get_user_recipes(user_id, limit=6, after_id=None, query=None):
    """
    One page of a user's recipes, newest first.

    Returns (recipes, last_id); last_id is None when there are no more pages.
    """
    if query is None:
        query = Recipe.query.filter_by(user_id=user_id)
    if after_id is not None:
        query = query.filter(Recipe.id < after_id)
    recipes = query.order_by(Recipe.id.desc()).limit(limit + 1).all()

    has_more = len(recipes) > limit
    recipes = recipes[:limit]
    last_id = recipes[-1].id if has_more and recipes else None
    return recipes, last_id


def filter_by_category(recipes, category):
    if not category or category == 'all':
        return list(recipes)
    return [r for r in recipes if category in (r.categories or [])]


def search_recipes(query, text):
    """Narrow a recipe query to names containing text."""
    text = (text or '').strip()
    if not text:
        return query
    return query.filter(Recipe.name.ilike(f'%{text}%'))


def get_user_stats(user_id):
    return {
        'recipes': get_user_recipe_count(user_id),
        'friends': Friendship.query.filter(
            or_(Friendship.user_a_id == user_id, Friendship.user_b_id == user_id)).count(),
        'followers': Follow.query.filter_by(followed_id=user_id).count(),
        'following': Follow.query.filter_by(follower_id=user_id).count(),
    }


def get_recipe_categories(user):
    """The user's own categories followed by any others used on their recipes."""
    categories = list(user.custom_categories or [])
    for (recipe_categories,) in db.session.query(Recipe.categories).filter_by(user_id=user.id):
        for category in recipe_categories or []:
            if category not in categories:
                categories.append(category)
    return categories
