"""
Notification Model
"""

from .base import db, utcnow


class Notification(db.Model):
    """Activity notice for user_id, triggered by from_user_id."""
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    type = db.Column(db.String(30), nullable=False)
    from_user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    from_user_name = db.Column(db.String(100), nullable=True)
    from_user_photo = db.Column(db.String(500), nullable=True)
    # friend request id or shared recipe id, depending on type
    related_item_id = db.Column(db.Integer, nullable=True, index=True)
    related_item_name = db.Column(db.String(200), nullable=True)
    recipe_id = db.Column(db.Integer, nullable=True)
    is_read = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'type': self.type,
            'fromUserId': self.from_user_id,
            'fromUserName': self.from_user_name,
            'fromUserPhoto': self.from_user_photo,
            'relatedItemId': self.related_item_id,
            'relatedItemName': self.related_item_name,
            'recipeId': self.recipe_id,
            'isRead': self.is_read,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
