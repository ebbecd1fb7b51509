"""
Tier Constants

Subscription tiers and the soft limits attached to each.
"""

TIER_FREE = 'Free'
TIER_PRO = 'Pro'
TIER_BETA = 'Beta Tester'

VALID_TIERS = [TIER_FREE, TIER_PRO, TIER_BETA]
DEFAULT_TIER = TIER_FREE

UNLIMITED = float('inf')

TIER_FEATURES = {
    TIER_FREE: {
        'max_recipes': 15,
        'max_friends': 0,
        'max_shared_recipes': 3,
        'priority_support': False,
        'early_access': False,
    },
    TIER_PRO: {
        'max_recipes': 250,
        'max_friends': 100,
        'max_shared_recipes': 50,
        'priority_support': True,
        'early_access': False,
    },
    TIER_BETA: {
        'max_recipes': UNLIMITED,
        'max_friends': UNLIMITED,
        'max_shared_recipes': UNLIMITED,
        'priority_support': True,
        'early_access': True,
    },
}

FEATURE_NAMES = {
    'max_recipes': 'Recipe Storage',
    'max_friends': 'Friends',
    'max_shared_recipes': 'Shared Recipes',
    'priority_support': 'Priority Support',
    'early_access': 'Early Access to Features',
}
