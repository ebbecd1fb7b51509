"""
Visibility Service

Single place that decides who may see a recipe, a profile or a friends
list. Views and API handlers call these helpers instead of comparing
visibility strings themselves.

Rules:
- the owner can always see their own things;
- 'public' is visible to anyone, signed in or not;
- 'friends' is visible to the owner's friends;
- 'private' recipes are visible to nobody else, friends included;
- a private profile is visible to friends, a private friends list only
  to its owner.
"""

import logging

from sqlalchemy import or_, and_

from constants import VISIBILITY_PUBLIC, VISIBILITY_FRIENDS, VISIBILITY_PRIVATE, STATUS_PENDING
from models import db, User, Recipe, Friendship, Follow, FriendRequest

logger = logging.getLogger(__name__)

BACKFILL_BATCH_SIZE = 500


def _user_id(user):
    """Id of a user object, or None for anonymous/missing viewers."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return user.id


def are_friends(user_id, other_id):
    if user_id is None or other_id is None or user_id == other_id:
        return False
    a, b = Friendship.ordered(user_id, other_id)
    return db.session.query(
        Friendship.query.filter_by(user_a_id=a, user_b_id=b).exists()
    ).scalar()


def get_relationship(viewer_id, target_id):
    """How viewer relates to target: friends, following, pending request."""
    if viewer_id is None or target_id is None or viewer_id == target_id:
        return {'is_friend': False, 'is_following': False, 'is_pending_friend': False}

    is_following = db.session.query(
        Follow.query.filter_by(follower_id=viewer_id, followed_id=target_id).exists()
    ).scalar()
    is_pending = db.session.query(
        FriendRequest.query.filter(
            FriendRequest.status == STATUS_PENDING,
            or_(
                and_(FriendRequest.sender_id == viewer_id, FriendRequest.receiver_id == target_id),
                and_(FriendRequest.sender_id == target_id, FriendRequest.receiver_id == viewer_id),
            )
        ).exists()
    ).scalar()

    return {
        'is_friend': are_friends(viewer_id, target_id),
        'is_following': is_following,
        'is_pending_friend': is_pending,
    }


def effective_recipe_visibility(recipe, owner=None):
    """The recipe's own visibility, else its owner's default, else public."""
    if recipe.visibility:
        return recipe.visibility
    owner = owner or recipe.owner
    if owner is not None and owner.recipe_visibility:
        return owner.recipe_visibility
    return VISIBILITY_PUBLIC


def can_view_recipe(recipe, viewer):
    viewer_id = _user_id(viewer)
    if viewer_id is not None and viewer_id == recipe.user_id:
        return True

    visibility = effective_recipe_visibility(recipe)
    if visibility == VISIBILITY_PUBLIC:
        return True
    if visibility == VISIBILITY_FRIENDS:
        return are_friends(viewer_id, recipe.user_id)
    return False


def can_edit_recipe(recipe, viewer):
    viewer_id = _user_id(viewer)
    return viewer_id is not None and viewer_id == recipe.user_id


def can_view_profile(profile, viewer):
    viewer_id = _user_id(viewer)
    if viewer_id == profile.id:
        return True
    if profile.profile_visibility != VISIBILITY_PRIVATE:
        return True
    return are_friends(viewer_id, profile.id)


def can_view_friends_list(profile, viewer):
    viewer_id = _user_id(viewer)
    if viewer_id == profile.id:
        return True
    return profile.friends_visibility != VISIBILITY_PRIVATE


def visible_visibilities(owner, viewer):
    """Effective visibility values of owner's recipes that viewer may see."""
    viewer_id = _user_id(viewer)
    if viewer_id == owner.id:
        return {VISIBILITY_PUBLIC, VISIBILITY_FRIENDS, VISIBILITY_PRIVATE}
    if are_friends(viewer_id, owner.id):
        return {VISIBILITY_PUBLIC, VISIBILITY_FRIENDS}
    return {VISIBILITY_PUBLIC}


def visible_recipes_query(owner, viewer):
    """Query of owner's recipes filtered to those viewer may see."""
    query = Recipe.query.filter(Recipe.user_id == owner.id)
    allowed = visible_visibilities(owner, viewer)
    if len(allowed) == 3:
        return query

    # Rows without their own visibility fall back to the owner's default
    owner_default = owner.recipe_visibility or VISIBILITY_PUBLIC
    conditions = [Recipe.visibility.in_(allowed)]
    if owner_default in allowed:
        conditions.append(Recipe.visibility.is_(None))
    return query.filter(or_(*conditions))


def backfill_recipe_visibility(batch_size=BACKFILL_BATCH_SIZE):
    """
    Write an explicit visibility onto every recipe that lacks one, using
    the owner's recipe_visibility (public if unset). Commits per batch.

    Returns the number of recipes updated.
    """
    migrated = 0
    owner_defaults = {}
    while True:
        batch = (Recipe.query
                 .filter(Recipe.visibility.is_(None))
                 .order_by(Recipe.id)
                 .limit(batch_size)
                 .all())
        if not batch:
            break

        for recipe in batch:
            if recipe.user_id not in owner_defaults:
                owner = db.session.get(User, recipe.user_id)
                owner_defaults[recipe.user_id] = (owner.recipe_visibility if owner else None) or VISIBILITY_PUBLIC
            recipe.visibility = owner_defaults[recipe.user_id]
        db.session.commit()
        migrated += len(batch)
        logger.info("Backfilled visibility on %d recipes (%d total)", len(batch), migrated)

    return migrated
