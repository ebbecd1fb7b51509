"""
Social Service

Friend requests, friendships, follows and recipe shares.
"""

import logging

from sqlalchemy import or_, and_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from constants import STATUS_PENDING, STATUS_ACCEPTED, STATUS_REJECTED, MAX_LENGTHS
from models import db, User, Recipe, FriendRequest, Friendship, Follow, SharedRecipe
from utils import sanitize_text
from .notifications import create_notification, delete_notifications_for
from .recipes import copy_recipe
from .tiers import check_limit
from .visibility import are_friends, can_view_recipe

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 20


class SocialError(Exception):
    """Raised when a social action is not allowed."""

    def __init__(self, message, status=400):
        super().__init__(message)
        self.status = status


def _get_user_or_error(user_id):
    try:
        user = db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        user = None
    if user is None:
        raise SocialError('User not found', status=404)
    return user


# ============================================
# FRIENDS
# ============================================

def get_friend_ids(user_id):
    rows = Friendship.query.filter(
        or_(Friendship.user_a_id == user_id, Friendship.user_b_id == user_id)).all()
    return [row.other(user_id) for row in rows]


def get_friend_count(user_id):
    return Friendship.query.filter(
        or_(Friendship.user_a_id == user_id, Friendship.user_b_id == user_id)).count()


def get_friends(user_id):
    ids = get_friend_ids(user_id)
    if not ids:
        return []
    return User.query.filter(User.id.in_(ids)).order_by(User.display_name, User.email).all()


def _pending_between(first_id, second_id):
    return FriendRequest.query.filter(
        FriendRequest.status == STATUS_PENDING,
        or_(
            and_(FriendRequest.sender_id == first_id, FriendRequest.receiver_id == second_id),
            and_(FriendRequest.sender_id == second_id, FriendRequest.receiver_id == first_id),
        )
    ).first()


def send_friend_request(sender, receiver_id):
    """
    Send a friend request and notify the receiver.

    Raises:
        SocialError: self-request, unknown user, duplicate or existing friendship
        TierLimitError: sender has no friend slots left
    """
    receiver = _get_user_or_error(receiver_id)
    if receiver.id == sender.id:
        raise SocialError('You cannot send a friend request to yourself')
    if are_friends(sender.id, receiver.id):
        raise SocialError('You are already friends with this user')
    if _pending_between(sender.id, receiver.id):
        raise SocialError('A friend request already exists between you and this user')

    check_limit(sender.tier, 'max_friends', get_friend_count(sender.id))

    request = FriendRequest(sender_id=sender.id, receiver_id=receiver.id, status=STATUS_PENDING)
    db.session.add(request)
    db.session.commit()
    logger.info("Friend request %s: %s -> %s", request.id, sender.id, receiver.id)

    create_notification(receiver.id, 'friend_request', sender, related_item_id=request.id)
    return request


def _get_request_or_error(request_id):
    request = db.session.get(FriendRequest, request_id)
    if request is None or request.status != STATUS_PENDING:
        raise SocialError('Friend request not found', status=404)
    return request


def accept_friend_request(request_id, user):
    """
    Receiver accepts: the friendship row is created, the request and its
    notification are deleted and the sender is notified, all in one
    transaction.
    """
    request = _get_request_or_error(request_id)
    if request.receiver_id != user.id:
        raise SocialError('Only the recipient can accept this friend request', status=403)

    sender = request.sender
    # Both sides must still have a free friend slot
    check_limit(user.tier, 'max_friends', get_friend_count(user.id))
    check_limit(sender.tier, 'max_friends', get_friend_count(sender.id))

    try:
        if not are_friends(request.sender_id, request.receiver_id):
            a, b = Friendship.ordered(request.sender_id, request.receiver_id)
            db.session.add(Friendship(user_a_id=a, user_b_id=b))
        delete_notifications_for('friend_request', request.id, commit=False)
        db.session.delete(request)
        create_notification(sender.id, 'friend_accept', user, commit=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Error accepting friend request %s", request_id)
        raise SocialError('Could not accept friend request', status=500)

    logger.info("Users %s and %s are now friends", sender.id, user.id)
    return sender


def reject_friend_request(request_id, user):
    """Either side may reject. The request and its notification are removed."""
    request = _get_request_or_error(request_id)
    if user.id not in (request.sender_id, request.receiver_id):
        raise SocialError('You cannot reject this friend request', status=403)

    delete_notifications_for('friend_request', request.id, commit=False)
    db.session.delete(request)
    db.session.commit()


def cancel_friend_request(request_id, user):
    request = _get_request_or_error(request_id)
    if request.sender_id != user.id:
        raise SocialError('Only the sender can cancel this friend request', status=403)

    delete_notifications_for('friend_request', request.id, commit=False)
    db.session.delete(request)
    db.session.commit()


def remove_friend(user, friend_id):
    a, b = Friendship.ordered(user.id, int(friend_id))
    friendship = Friendship.query.filter_by(user_a_id=a, user_b_id=b).first()
    if friendship is None:
        raise SocialError('You are not friends with this user', status=404)
    db.session.delete(friendship)
    db.session.commit()
    logger.info("User %s removed friend %s", user.id, friend_id)


def get_incoming_requests(user_id):
    return (FriendRequest.query
            .filter_by(receiver_id=user_id, status=STATUS_PENDING)
            .order_by(FriendRequest.created_at.desc())
            .all())


def get_outgoing_requests(user_id):
    return (FriendRequest.query
            .filter_by(sender_id=user_id, status=STATUS_PENDING)
            .order_by(FriendRequest.created_at.desc())
            .all())


# ============================================
# FOLLOWS
# ============================================

def follow_user(follower, target_id):
    """Follow target and notify them. Following twice is a no-op."""
    target = _get_user_or_error(target_id)
    if target.id == follower.id:
        raise SocialError('You cannot follow yourself')

    existing = Follow.query.filter_by(follower_id=follower.id, followed_id=target.id).first()
    if existing:
        return existing

    follow = Follow(follower_id=follower.id, followed_id=target.id)
    db.session.add(follow)
    try:
        db.session.commit()
    except IntegrityError:
        # Concurrent follow of the same user
        db.session.rollback()
        return Follow.query.filter_by(follower_id=follower.id, followed_id=target.id).first()

    create_notification(target.id, 'follow', follower)
    return follow


def unfollow_user(follower, target_id):
    deleted = (Follow.query
               .filter_by(follower_id=follower.id, followed_id=int(target_id))
               .delete(synchronize_session=False))
    db.session.commit()
    return deleted > 0


def get_following(user_id):
    return (User.query
            .join(Follow, Follow.followed_id == User.id)
            .filter(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc())
            .all())


def get_followers(user_id):
    return (User.query
            .join(Follow, Follow.follower_id == User.id)
            .filter(Follow.followed_id == user_id)
            .order_by(Follow.created_at.desc())
            .all())


# ============================================
# SHARED RECIPES
# ============================================

def share_recipe(sender, recipe_id, receiver_id, message=''):
    """
    Offer a recipe to a friend.

    Raises:
        SocialError: recipe not visible to sender (or, for a recipe the
            sender does not own, to the receiver), receiver not a friend,
            or a pending share of the same recipe already exists
        TierLimitError: sender's share limit reached
    """
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None or not can_view_recipe(recipe, sender):
        raise SocialError('Recipe not found', status=404)

    receiver = _get_user_or_error(receiver_id)
    if receiver.id == sender.id:
        raise SocialError('You cannot share a recipe with yourself')
    if not are_friends(sender.id, receiver.id):
        raise SocialError('You can only share recipes with friends', status=403)
    if recipe.user_id != sender.id and not can_view_recipe(recipe, receiver):
        raise SocialError('This recipe is not visible to that friend', status=403)

    duplicate = SharedRecipe.query.filter_by(
        recipe_id=recipe.id, sender_id=sender.id, receiver_id=receiver.id, status=STATUS_PENDING).first()
    if duplicate:
        raise SocialError('You have already shared this recipe with this friend')

    check_limit(sender.tier, 'max_shared_recipes',
                SharedRecipe.query.filter_by(sender_id=sender.id).count())

    share = SharedRecipe(
        recipe_id=recipe.id,
        recipe_name=recipe.name,
        recipe_image_url=recipe.image_url or '',
        sender_id=sender.id,
        receiver_id=receiver.id,
        message=sanitize_text(message, max_length=MAX_LENGTHS['message']),
        status=STATUS_PENDING,
    )
    db.session.add(share)
    db.session.commit()
    logger.info("User %s shared recipe %s with %s", sender.id, recipe.id, receiver.id)

    create_notification(receiver.id, 'recipe_share', sender, related_item_id=share.id,
                        related_item_name=recipe.name, recipe_id=recipe.id)
    return share


def _can_pass_on(recipe, sender, receiver):
    """The sender must see the recipe and, unless they own it, so must the receiver."""
    if sender is None or not can_view_recipe(recipe, sender):
        return False
    return recipe.user_id == sender.id or can_view_recipe(recipe, receiver)


def _get_share_or_error(share_id, user):
    share = db.session.get(SharedRecipe, share_id)
    if share is None or share.status != STATUS_PENDING:
        raise SocialError('Shared recipe not found', status=404)
    if share.receiver_id != user.id:
        raise SocialError('This recipe was not shared with you', status=403)
    return share


def accept_shared_recipe(share_id, user):
    """
    Copy the shared recipe into the receiver's collection with attribution
    and mark the share accepted.

    Raises:
        TierLimitError: receiver's recipe storage is full
    """
    share = _get_share_or_error(share_id, user)
    if share.recipe is None:
        raise SocialError('The shared recipe no longer exists', status=404)
    if not _can_pass_on(share.recipe, share.sender, user):
        raise SocialError('This recipe is no longer available to you', status=403)

    copy = copy_recipe(share.recipe, user, commit=False)
    share.status = STATUS_ACCEPTED
    delete_notifications_for('recipe_share', share.id, commit=False)
    db.session.commit()
    logger.info("User %s accepted shared recipe %s as %s", user.id, share.id, copy.id)
    return copy


def reject_shared_recipe(share_id, user):
    """The share is kept as rejected; its notification is removed."""
    share = _get_share_or_error(share_id, user)
    delete_notifications_for('recipe_share', share.id, commit=False)
    share.status = STATUS_REJECTED
    db.session.commit()


def get_pending_shares(user_id):
    return (SharedRecipe.query
            .filter_by(receiver_id=user_id, status=STATUS_PENDING)
            .order_by(SharedRecipe.created_at.desc())
            .all())


# ============================================
# SEARCH
# ============================================

def search_users(query, viewer=None, exclude_connected=False, limit=SEARCH_LIMIT):
    """
    Users whose email or display name contains query (case-insensitive).
    Shorter queries than two characters return nothing.
    """
    query = (query or '').strip().lower()
    if len(query) < MIN_SEARCH_LENGTH:
        return []

    # Wildcards in the query match literally
    escaped = query.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    pattern = f'%{escaped}%'
    users = User.query.filter(or_(
        func.lower(User.email).like(pattern, escape='\\'),
        func.lower(User.display_name).like(pattern, escape='\\'),
    ))

    if viewer is not None and getattr(viewer, 'is_authenticated', False):
        users = users.filter(User.id != viewer.id)
        if exclude_connected:
            excluded = set(get_friend_ids(viewer.id))
            excluded.update(r.receiver_id for r in get_outgoing_requests(viewer.id))
            excluded.update(r.sender_id for r in get_incoming_requests(viewer.id))
            if excluded:
                users = users.filter(User.id.notin_(excluded))

    return users.order_by(User.display_name, User.email).limit(limit).all()
