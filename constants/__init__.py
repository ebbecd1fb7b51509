"""
Constants Package

Lookup tables and whitelists shared across the application.
"""

from .units import RECIPE_UNITS, COMMON_FRACTIONS, UNICODE_FRACTIONS
from .validation import (
    VISIBILITY_PUBLIC, VISIBILITY_FRIENDS, VISIBILITY_PRIVATE,
    VALID_RECIPE_VISIBILITIES, VALID_PROFILE_VISIBILITIES,
    STATUS_PENDING, STATUS_ACCEPTED, STATUS_REJECTED,
    NOTIFICATION_TYPES, VALID_ROLES, DEFAULT_CATEGORIES,
    MAX_LENGTHS, ALLOWED_IMAGE_TYPES,
)
from .tiers import (
    TIER_FREE, TIER_PRO, TIER_BETA, VALID_TIERS, DEFAULT_TIER,
    UNLIMITED, TIER_FEATURES, FEATURE_NAMES,
)
