"""
User Model

Profile, credentials, tier and privacy settings for an account.
"""

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from constants import DEFAULT_CATEGORIES, DEFAULT_TIER
from .base import db, utcnow


class User(UserMixin, db.Model):
    """Account and public profile. Created on sign-up with default settings."""
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(100), nullable=True, index=True)
    photo_url = db.Column(db.String(500), nullable=True)
    bio = db.Column(db.Text, nullable=True)
    tier = db.Column(db.String(20), default=DEFAULT_TIER, nullable=False)
    role = db.Column(db.String(20), default='user', nullable=False)

    # Privacy settings
    profile_visibility = db.Column(db.String(20), default='public', nullable=False)
    friends_visibility = db.Column(db.String(20), default='public', nullable=False)
    # Default for recipes that carry no visibility of their own
    recipe_visibility = db.Column(db.String(20), default='public', nullable=False)

    custom_categories = db.Column(db.JSON, default=lambda: list(DEFAULT_CATEGORIES))

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    recipes = db.relationship('Recipe', backref='owner', lazy=True, foreign_keys='Recipe.user_id')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def name(self):
        """Display name with the email's local part as fallback."""
        return self.display_name or self.email.split('@')[0]

    def __repr__(self):
        return f'<User {self.id} {self.email!r}>'
