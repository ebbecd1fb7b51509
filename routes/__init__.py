"""
Routes Package

One blueprint per area of the site, plus the JSON API.
"""

import hmac
from urllib.parse import urlparse

from flask import current_app, request, url_for


def register_blueprints(app):
    from .pages import pages_bp
    from .auth import auth_bp
    from .recipes import recipes_bp
    from .profile import profile_bp
    from .friends import friends_bp
    from .notifications import notifications_bp
    from .admin import admin_bp
    from .api import api_bp

    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(recipes_bp, url_prefix='/recipes')
    app.register_blueprint(profile_bp, url_prefix='/profile')
    app.register_blueprint(friends_bp, url_prefix='/friends')
    app.register_blueprint(notifications_bp, url_prefix='/notifications')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(api_bp, url_prefix='/api')


def admin_secret_ok(secret):
    """Constant-time comparison against ADMIN_MIGRATION_SECRET."""
    expected = current_app.config.get('ADMIN_MIGRATION_SECRET') or ''
    if not secret or not expected:
        return False
    return hmac.compare_digest(str(secret).encode(), expected.encode())


def redirect_target(default_endpoint, **values):
    """The form's 'next' value if it is a local path, else the default endpoint."""
    target = request.form.get('next') or request.args.get('next')
    if target:
        parsed = urlparse(target)
        if not parsed.scheme and not parsed.netloc and target.startswith('/') and not target.startswith('//'):
            return target
    return url_for(default_endpoint, **values)
