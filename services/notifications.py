"""
Notification Service

Creates and queries per-user activity notices. Creating a notification
never fails the action that triggered it.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from constants import NOTIFICATION_TYPES
from models import db, Notification

logger = logging.getLogger(__name__)


def create_notification(user_id, type, from_user, related_item_id=None,
                        related_item_name=None, recipe_id=None, commit=True):
    """
    Record a notification for user_id triggered by from_user.

    Returns the Notification, or None if it could not be stored.
    """
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {type}")

    notification = Notification(
        user_id=user_id,
        type=type,
        from_user_id=from_user.id,
        from_user_name=from_user.name,
        from_user_photo=from_user.photo_url,
        related_item_id=related_item_id,
        related_item_name=related_item_name,
        recipe_id=recipe_id,
    )
    if not commit:
        db.session.add(notification)
        return notification

    try:
        db.session.add(notification)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Error creating %s notification for user %s", type, user_id)
        return None
    return notification


def get_user_notifications(user_id, limit=20, only_unread=False):
    """Newest first."""
    query = Notification.query.filter_by(user_id=user_id)
    if only_unread:
        query = query.filter_by(is_read=False)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def get_unread_count(user_id):
    return Notification.query.filter_by(user_id=user_id, is_read=False).count()


def get_notification(notification_id, user_id):
    """A notification, only if it belongs to user_id."""
    return Notification.query.filter_by(id=notification_id, user_id=user_id).first()


def mark_notification_read(notification_id, user_id):
    notification = get_notification(notification_id, user_id)
    if notification is None:
        return False
    notification.is_read = True
    db.session.commit()
    return True


def mark_all_read(user_id):
    count = (Notification.query
             .filter_by(user_id=user_id, is_read=False)
             .update({'is_read': True}, synchronize_session=False))
    db.session.commit()
    return count


def delete_notification(notification_id, user_id):
    notification = get_notification(notification_id, user_id)
    if notification is None:
        return False
    db.session.delete(notification)
    db.session.commit()
    return True


def delete_notifications_for(type, related_item_id, commit=True):
    """Remove notifications about an item once it has been actioned."""
    count = (Notification.query
             .filter_by(type=type, related_item_id=related_item_id)
             .delete(synchronize_session='fetch'))
    if commit:
        db.session.commit()
    return count
