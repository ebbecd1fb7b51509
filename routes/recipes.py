import logging

from flask import Blueprint, current_app, request, redirect, render_template, url_for, flash, abort
from flask_login import login_required, current_user

from constants import VALID_RECIPE_VISIBILITIES
from models import db, Recipe, utcnow
from services import (
    create_recipe, update_recipe, delete_recipe, get_user_recipes, get_recipe_categories,
    can_view_recipe, can_edit_recipe, effective_recipe_visibility, share_recipe, get_friends,
    parse_bulk_ingredients, parse_bulk_instructions, scrape_recipe, image_to_recipe,
    RecipeError, SocialError, TierLimitError, ScrapeError, OCRError,
)
from services.recipes import filter_by_category, search_recipes
from utils import read_upload, save_recipe_image, ImageValidationError

logger = logging.getLogger(__name__)

recipes_bp = Blueprint('recipes', __name__)

PAGE_SIZE = 12


def empty_draft():
    return {
        'name': '', 'servings': '', 'prep_time': '', 'cook_time': '',
        'ingredients': [], 'instructions': [], 'categories': [],
        'image_url': '', 'source_url': '', 'source_name': '',
        'visibility': current_user.recipe_visibility, 'scraped': False,
    }


def draft_from_recipe(recipe):
    return {
        'name': recipe.name,
        'servings': recipe.servings or '',
        'prep_time': recipe.prep_time or '',
        'cook_time': recipe.cook_time or '',
        'ingredients': [
            {'amount': ri.amount, 'unit': ri.unit, 'item': ri.item, 'group_name': ri.group_name}
            for ri in recipe.ingredients
        ],
        'instructions': [step.text for step in recipe.instructions],
        'categories': list(recipe.categories or []),
        'image_url': recipe.image_url or '',
        'source_url': recipe.source_url or '',
        'source_name': recipe.source_name or '',
        'visibility': effective_recipe_visibility(recipe),
        'scraped': False,
    }


def recipe_data_from_form(form, files):
    """
    Build service-layer recipe data from the add/edit form.

    Ingredient rows come from the row fields and from the bulk text box;
    instructions likewise.
    """
    ingredients = []
    rows = zip(form.getlist('ingredient_amount'), form.getlist('ingredient_unit'),
               form.getlist('ingredient_item'), form.getlist('ingredient_group'))
    for amount, unit, item, group in rows:
        if item.strip() or amount.strip():
            ingredients.append({'amount': amount, 'unit': unit, 'item': item, 'group_name': group})
    ingredients.extend(parse_bulk_ingredients(form.get('ingredients_text', '')))

    instructions = [step for step in form.getlist('instruction') if step.strip()]
    instructions.extend(parse_bulk_instructions(form.get('instructions_text', '')))

    categories = form.getlist('categories')
    for extra in form.get('new_categories', '').split(','):
        if extra.strip():
            categories.append(extra.strip())

    data = {
        'name': form.get('name', ''),
        'servings': form.get('servings', ''),
        'prep_time': form.get('prep_time', ''),
        'cook_time': form.get('cook_time', ''),
        'ingredients': ingredients,
        'instructions': instructions,
        'categories': categories,
        'image_url': form.get('image_url', ''),
        'source_url': form.get('source_url', ''),
        'source_name': form.get('source_name', ''),
    }
    # A missing or unknown choice leaves the visibility as it is
    visibility = form.get('visibility')
    if visibility in VALID_RECIPE_VISIBILITIES:
        data['visibility'] = visibility
    if form.get('scraped'):
        data['last_scraped'] = utcnow()

    image = files.get('image')
    if image and image.filename:
        data['image_url'] = save_recipe_image(read_upload(image), current_app.config['UPLOAD_FOLDER'])
    return data


def render_form(draft, recipe=None, raw_text=None):
    return render_template('recipe_form.html',
                           draft=draft,
                           recipe=recipe,
                           raw_text=raw_text,
                           categories=get_recipe_categories(current_user),
                           visibilities=sorted(VALID_RECIPE_VISIBILITIES))


# ============================================
# ROUTES - LIST / VIEW
# ============================================

@recipes_bp.route('/')
@login_required
def recipes_list():
    category = request.args.get('category', 'all')
    text = request.args.get('q', '')
    after_id = request.args.get('after', type=int)

    query = search_recipes(Recipe.query.filter_by(user_id=current_user.id), text)
    if category == 'all':
        recipes, last_id = get_user_recipes(current_user.id, limit=PAGE_SIZE, after_id=after_id, query=query)
    else:
        # Categories are a JSON list, so filter in Python on the full result
        recipes = filter_by_category(query.order_by(Recipe.id.desc()).all(), category)
        last_id = None

    return render_template('recipes.html',
                           recipes=recipes,
                           last_id=last_id,
                           categories=get_recipe_categories(current_user),
                           selected_category=category,
                           q=text)


@recipes_bp.route('/<int:id>')
def recipe_view(id):
    recipe = db.get_or_404(Recipe, id)
    if not can_view_recipe(recipe, current_user):
        abort(403)

    friends = get_friends(current_user.id) if current_user.is_authenticated else []
    return render_template('recipe_view.html',
                           recipe=recipe,
                           visibility=effective_recipe_visibility(recipe),
                           can_edit=can_edit_recipe(recipe, current_user),
                           friends=friends)


# ============================================
# ROUTES - ADD / EDIT / DELETE
# ============================================

@recipes_bp.route('/add', methods=['GET', 'POST'])
@login_required
def recipe_add():
    if request.method == 'POST':
        try:
            data = recipe_data_from_form(request.form, request.files)
            recipe = create_recipe(current_user, data)
        except (RecipeError, TierLimitError, ImageValidationError) as e:
            flash(str(e), 'danger')
            draft = empty_draft()
            draft.update({k: v for k, v in request.form.items() if k in draft and not isinstance(draft[k], list)})
            return render_form(draft)

        flash(f'Recipe "{recipe.name}" created!', 'success')
        return redirect(url_for('recipes.recipe_view', id=recipe.id))

    return render_form(empty_draft())


@recipes_bp.route('/<int:id>/edit', methods=['GET', 'POST'])
@login_required
def recipe_edit(id):
    recipe = db.get_or_404(Recipe, id)
    if not can_edit_recipe(recipe, current_user):
        abort(403)

    if request.method == 'POST':
        try:
            data = recipe_data_from_form(request.form, request.files)
            update_recipe(recipe.id, current_user, data)
        except (RecipeError, ImageValidationError) as e:
            db.session.rollback()
            flash(str(e), 'danger')
            return render_form(draft_from_recipe(recipe), recipe=recipe)

        flash(f'Recipe "{recipe.name}" updated!', 'success')
        return redirect(url_for('recipes.recipe_view', id=recipe.id))

    return render_form(draft_from_recipe(recipe), recipe=recipe)


@recipes_bp.route('/<int:id>/delete', methods=['POST'])
@login_required
def recipe_delete(id):
    recipe = db.get_or_404(Recipe, id)
    name = recipe.name
    try:
        delete_recipe(recipe.id, current_user)
    except RecipeError as e:
        if e.status == 403:
            abort(403)
        flash(str(e), 'danger')
        return redirect(url_for('recipes.recipe_view', id=id))

    flash(f'Recipe "{name}" deleted!', 'success')
    return redirect(url_for('recipes.recipes_list'))


# ============================================
# ROUTES - IMPORT
# ============================================

@recipes_bp.route('/import', methods=['GET', 'POST'])
@login_required
def recipe_import():
    if request.method == 'POST':
        url = request.form.get('url', '').strip()
        if not url:
            flash('Please enter a URL', 'warning')
            return render_template('recipe_import.html')

        try:
            scraped = scrape_recipe(url)
        except ScrapeError as e:
            flash(str(e), 'danger')
            return render_template('recipe_import.html', url=url)

        draft = empty_draft()
        draft.update(scraped)
        draft['scraped'] = True
        flash('Recipe imported. Review it and save.', 'info')
        return render_form(draft)

    return render_template('recipe_import.html')


@recipes_bp.route('/scan', methods=['GET', 'POST'])
@login_required
def recipe_scan():
    if request.method == 'POST':
        try:
            image_bytes = read_upload(request.files.get('file'))
            result = image_to_recipe(image_bytes)
        except (ImageValidationError, OCRError) as e:
            flash(str(e), 'danger')
            return render_template('recipe_scan.html')

        draft = empty_draft()
        parsed = result['recipe']
        for key in ('name', 'servings', 'prep_time', 'cook_time', 'ingredients', 'instructions'):
            draft[key] = parsed[key]
        flash('Text extracted from your photo. Check it carefully before saving.', 'info')
        return render_form(draft, raw_text=result['raw_text'])

    return render_template('recipe_scan.html')


# ============================================
# ROUTES - SHARING
# ============================================

@recipes_bp.route('/<int:id>/share', methods=['POST'])
@login_required
def recipe_share(id):
    receiver_id = request.form.get('receiver_id', type=int)
    if not receiver_id:
        flash('Choose a friend to share with.', 'warning')
        return redirect(url_for('recipes.recipe_view', id=id))

    try:
        share = share_recipe(current_user, id, receiver_id, request.form.get('message', ''))
    except (SocialError, TierLimitError) as e:
        flash(str(e), 'danger')
        return redirect(url_for('recipes.recipe_view', id=id))

    flash(f'Shared "{share.recipe_name}"!', 'success')
    return redirect(url_for('recipes.recipe_view', id=id))
