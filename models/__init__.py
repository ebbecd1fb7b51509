"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db, utcnow

from .user import User
from .recipe import Recipe, RecipeIngredient, RecipeInstruction
from .social import FriendRequest, Friendship, Follow, SharedRecipe
from .notification import Notification

__all__ = [
    'db',
    'utcnow',
    'User',
    'Recipe',
    'RecipeIngredient',
    'RecipeInstruction',
    'FriendRequest',
    'Friendship',
    'Follow',
    'SharedRecipe',
    'Notification',
]
