"""
Validation Constants

Whitelist values for validating user input and keeping stored
enums consistent.
"""

# Recipe / profile visibility values
VISIBILITY_PUBLIC = 'public'
VISIBILITY_FRIENDS = 'friends'
VISIBILITY_PRIVATE = 'private'

VALID_RECIPE_VISIBILITIES = {VISIBILITY_PUBLIC, VISIBILITY_FRIENDS, VISIBILITY_PRIVATE}
VALID_PROFILE_VISIBILITIES = {VISIBILITY_PUBLIC, VISIBILITY_PRIVATE}

# Relationship record statuses
STATUS_PENDING = 'pending'
STATUS_ACCEPTED = 'accepted'
STATUS_REJECTED = 'rejected'

# Notification types
NOTIFICATION_TYPES = {'follow', 'friend_request', 'friend_accept', 'recipe_share'}

# User roles
VALID_ROLES = {'user', 'admin'}

# Categories a new profile starts with
DEFAULT_CATEGORIES = ['Breakfast', 'Lunch', 'Dinner', 'Dessert', 'Snack']

# Maximum field lengths
MAX_LENGTHS = {
    'recipe_name': 200,
    'display_name': 100,
    'bio': 1000,
    'category': 50,
    'instruction': 5000,
    'source_url': 500,
    'ingredient_text': 500,
    'message': 500,
}

# Allowed image MIME types
ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/png', 'image/gif', 'image/webp'}
