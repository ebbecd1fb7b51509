"""
Social Models

Flat relationship rows: friend requests, friendships, follows and
recipe shares.
"""

from constants import STATUS_PENDING
from .base import db, utcnow


class FriendRequest(db.Model):
    """Pending offer of friendship from sender to receiver."""
    id = db.Column(db.Integer, primary_key=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    receiver_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    status = db.Column(db.String(20), default=STATUS_PENDING, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    sender = db.relationship('User', foreign_keys=[sender_id])
    receiver = db.relationship('User', foreign_keys=[receiver_id])


class Friendship(db.Model):
    """
    Mutual friendship. One row per pair, lower user id in user_a_id,
    so the same row answers the question from either side.
    """
    __table_args__ = (
        db.UniqueConstraint('user_a_id', 'user_b_id', name='uq_friendship_pair'),
        db.CheckConstraint('user_a_id < user_b_id', name='ck_friendship_order'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_a_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    user_b_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    @staticmethod
    def ordered(first_id, second_id):
        return (first_id, second_id) if first_id < second_id else (second_id, first_id)

    def other(self, user_id):
        return self.user_b_id if self.user_a_id == user_id else self.user_a_id


class Follow(db.Model):
    """One-way follow."""
    __table_args__ = (
        db.UniqueConstraint('follower_id', 'followed_id', name='uq_follow_pair'),
    )
    id = db.Column(db.Integer, primary_key=True)
    follower_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    followed_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)


class SharedRecipe(db.Model):
    """Offer of a recipe from one user to another; accepted by copying the recipe."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    recipe_name = db.Column(db.String(200), nullable=False)
    recipe_image_url = db.Column(db.String(500), default='')
    sender_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    receiver_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    message = db.Column(db.String(500), default='')
    status = db.Column(db.String(20), default=STATUS_PENDING, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    sender = db.relationship('User', foreign_keys=[sender_id])
    recipe = db.relationship('Recipe')
