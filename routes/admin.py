import logging

from flask import Blueprint, request, render_template, flash
from flask_login import current_user

from services import backfill_recipe_visibility, set_admin_role, UserError
from services.users import get_user_by_email
from . import admin_secret_ok

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


def _authorized(secret):
    """Signed-in admins need no secret; everyone else must supply it."""
    if current_user.is_authenticated and current_user.is_admin:
        return True
    return admin_secret_ok(secret)


@admin_bp.route('/migrate', methods=['GET', 'POST'])
def migrate():
    result = None
    if request.method == 'POST':
        if not _authorized(request.form.get('secret')):
            logger.warning("Rejected visibility migration from %s", request.remote_addr)
            flash('Unauthorized. Check the admin secret.', 'danger')
            return render_template('admin_migrate.html'), 401

        result = backfill_recipe_visibility()
        flash(f'Migration complete. Updated {result} recipe(s).', 'success')

    return render_template('admin_migrate.html', result=result)


@admin_bp.route('/set-admin', methods=['GET', 'POST'])
def set_admin():
    if request.method == 'POST':
        if not _authorized(request.form.get('secret')):
            flash('Unauthorized. Check the admin secret.', 'danger')
            return render_template('admin_set_admin.html'), 401

        target = request.form.get('user', '').strip()
        user = get_user_by_email(target) if '@' in target else None
        user_id = user.id if user else target

        try:
            user = set_admin_role(user_id)
        except UserError as e:
            flash(str(e), 'danger')
            return render_template('admin_set_admin.html'), e.status

        flash(f'{user.email} is now an admin.', 'success')

    return render_template('admin_set_admin.html')
