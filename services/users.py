"""
User Service

Account creation, sign-in and profile settings.
"""

import logging
import re

from constants import (
    VALID_TIERS, VALID_PROFILE_VISIBILITIES, VALID_RECIPE_VISIBILITIES, VALID_ROLES,
    DEFAULT_CATEGORIES, DEFAULT_TIER, MAX_LENGTHS,
)
from models import db, User
from utils import sanitize_text, sanitize_multiline, sanitize_url

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6


class UserError(Exception):
    """Raised for invalid account or profile data."""

    def __init__(self, message, status=400):
        super().__init__(message)
        self.status = status


def normalize_email(email):
    return (email or '').strip().lower()


def get_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def get_user_by_email(email):
    return User.query.filter_by(email=normalize_email(email)).first()


def create_user(email, password, display_name=None):
    """Sign-up: a new account with default tier, privacy and categories."""
    email = normalize_email(email)
    if not EMAIL_PATTERN.match(email):
        raise UserError('Please enter a valid email address')
    if len(password or '') < MIN_PASSWORD_LENGTH:
        raise UserError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    if get_user_by_email(email):
        raise UserError('An account with this email already exists')

    user = User(
        email=email,
        display_name=sanitize_text(display_name, max_length=MAX_LENGTHS['display_name']) or None,
        tier=DEFAULT_TIER,
        role='user',
        profile_visibility='public',
        friends_visibility='public',
        recipe_visibility='public',
        custom_categories=list(DEFAULT_CATEGORIES),
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info("Created user %s", user.id)
    return user


def authenticate(email, password):
    """The matching user, or None."""
    user = get_user_by_email(email)
    if user is None or not user.check_password(password or ''):
        logger.info("Failed sign-in for %s", normalize_email(email))
        return None
    return user


def update_profile(user, data):
    """
    Update editable profile fields: display_name, bio, photo_url,
    profile_visibility, friends_visibility, recipe_visibility,
    custom_categories. Missing keys are left alone.
    """
    if 'display_name' in data:
        user.display_name = sanitize_text(data['display_name'], max_length=MAX_LENGTHS['display_name']) or None
    if 'bio' in data:
        user.bio = sanitize_multiline(data['bio'], max_length=MAX_LENGTHS['bio'])
    if 'photo_url' in data:
        user.photo_url = sanitize_url(data['photo_url']) or None

    for field, allowed in (('profile_visibility', VALID_PROFILE_VISIBILITIES),
                           ('friends_visibility', VALID_PROFILE_VISIBILITIES),
                           ('recipe_visibility', VALID_RECIPE_VISIBILITIES)):
        if field in data:
            value = data[field]
            if value not in allowed:
                raise UserError(f'Invalid value for {field.replace("_", " ")}: {value}')
            setattr(user, field, value)

    if 'custom_categories' in data:
        categories = []
        for category in data['custom_categories'] or []:
            category = sanitize_text(category, max_length=MAX_LENGTHS['category'])
            if category and category not in categories:
                categories.append(category)
        user.custom_categories = categories

    db.session.commit()
    return user


def update_tier(user_id, tier):
    if tier not in VALID_TIERS:
        raise UserError('Invalid tier')
    user = get_user(user_id)
    if user is None:
        raise UserError('User not found', status=404)
    user.tier = tier
    db.session.commit()
    logger.info("User %s moved to tier %s", user.id, tier)
    return user


def set_admin_role(user_id, role='admin'):
    if role not in VALID_ROLES:
        raise UserError('Invalid role')
    user = get_user(user_id)
    if user is None:
        raise UserError('User not found', status=404)
    user.role = role
    db.session.commit()
    logger.info("User %s given role %s", user.id, role)
    return user
