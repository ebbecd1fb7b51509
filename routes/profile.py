from flask import Blueprint, request, redirect, render_template, url_for, flash
from flask_login import login_required, current_user

from constants import VALID_PROFILE_VISIBILITIES, VALID_RECIPE_VISIBILITIES
from models import db, User
from services import (
    get_relationship, can_view_profile, can_view_friends_list, visible_recipes_query,
    get_user_recipes, get_user_stats, get_friends, update_profile, UserError,
)

profile_bp = Blueprint('profile', __name__)

PAGE_SIZE = 6


@profile_bp.route('/<int:user_id>')
def profile_view(user_id):
    profile = db.get_or_404(User, user_id)
    viewer_id = current_user.id if current_user.is_authenticated else None
    relationship = get_relationship(viewer_id, profile.id)

    if not can_view_profile(profile, current_user):
        # Private profile: name and the add-friend button only
        return render_template('profile.html', profile=profile, relationship=relationship,
                               restricted=True, is_own=False)

    after_id = request.args.get('after', type=int)
    recipes, last_id = get_user_recipes(profile.id, limit=PAGE_SIZE, after_id=after_id,
                                        query=visible_recipes_query(profile, current_user))
    friends = get_friends(profile.id) if can_view_friends_list(profile, current_user) else None

    return render_template('profile.html',
                           profile=profile,
                           relationship=relationship,
                           restricted=False,
                           is_own=viewer_id == profile.id,
                           recipes=recipes,
                           last_id=last_id,
                           stats=get_user_stats(profile.id),
                           friends=friends)


@profile_bp.route('/')
@login_required
def my_profile():
    return redirect(url_for('profile.profile_view', user_id=current_user.id))


@profile_bp.route('/edit', methods=['GET', 'POST'])
@login_required
def profile_edit():
    if request.method == 'POST':
        data = {
            'display_name': request.form.get('display_name', ''),
            'bio': request.form.get('bio', ''),
            'photo_url': request.form.get('photo_url', ''),
            'profile_visibility': request.form.get('profile_visibility', current_user.profile_visibility),
            'friends_visibility': request.form.get('friends_visibility', current_user.friends_visibility),
            'recipe_visibility': request.form.get('recipe_visibility', current_user.recipe_visibility),
        }
        if 'custom_categories' in request.form:
            data['custom_categories'] = request.form.get('custom_categories', '').split(',')

        try:
            update_profile(current_user, data)
        except UserError as e:
            db.session.rollback()
            flash(str(e), 'danger')
        else:
            flash('Profile updated!', 'success')
            return redirect(url_for('profile.profile_view', user_id=current_user.id))

    return render_template('profile_edit.html',
                           profile_visibilities=sorted(VALID_PROFILE_VISIBILITIES),
                           recipe_visibilities=sorted(VALID_RECIPE_VISIBILITIES))
