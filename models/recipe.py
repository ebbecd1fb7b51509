"""
Recipe Models

Contains the Recipe model and its ordered ingredient and
instruction rows.
"""

from .base import db, utcnow


class Recipe(db.Model):
    """Recipe with metadata, ordered ingredients and instructions."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    servings = db.Column(db.String(50), default='')
    prep_time = db.Column(db.String(50), default='')
    cook_time = db.Column(db.String(50), default='')
    categories = db.Column(db.JSON, default=list)
    image_url = db.Column(db.String(500), default='')
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    source_url = db.Column(db.String(500), default='')
    source_name = db.Column(db.String(200), default='')
    last_scraped = db.Column(db.DateTime, nullable=True)

    # Attribution when the recipe was copied from a share
    original_creator_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True)
    original_creator_name = db.Column(db.String(100), nullable=True)

    # NULL on legacy rows; resolved through the owner's recipe_visibility
    visibility = db.Column(db.String(20), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    ingredients = db.relationship('RecipeIngredient', backref='recipe', lazy=True,
                                  order_by='RecipeIngredient.position', cascade='all, delete-orphan')
    instructions = db.relationship('RecipeInstruction', backref='recipe', lazy=True,
                                   order_by='RecipeInstruction.position', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'servings': self.servings or '',
            'prepTime': self.prep_time or '',
            'cookTime': self.cook_time or '',
            'ingredients': [ri.to_dict() for ri in self.ingredients],
            'instructions': [step.text for step in self.instructions],
            'categories': list(self.categories or []),
            'imageUrl': self.image_url or '',
            'userId': self.user_id,
            'sourceUrl': self.source_url or '',
            'sourceName': self.source_name or '',
            'visibility': self.visibility,
        }


class RecipeIngredient(db.Model):
    """One ingredient line split into amount, unit and item."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    position = db.Column(db.Integer, default=0, nullable=False)
    amount = db.Column(db.String(50), default='')
    unit = db.Column(db.String(30), default='')
    item = db.Column(db.String(500), nullable=False)
    group_name = db.Column(db.String(100), default='')

    def to_dict(self):
        return {'amount': self.amount or '', 'unit': self.unit or '', 'item': self.item,
                'groupName': self.group_name or ''}


class RecipeInstruction(db.Model):
    """One instruction step."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    position = db.Column(db.Integer, default=0, nullable=False)
    text = db.Column(db.Text, nullable=False)
    group_name = db.Column(db.String(100), default='')
