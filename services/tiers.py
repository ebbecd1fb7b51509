"""
Tier Service

Soft limits per subscription tier. Unknown tiers are treated as Free.
"""

from constants import TIER_FEATURES, FEATURE_NAMES, DEFAULT_TIER, UNLIMITED


class TierLimitError(Exception):
    """Raised when an action would exceed the user's tier limit."""

    def __init__(self, tier, feature, limit):
        self.tier = tier
        self.feature = feature
        self.limit = limit
        super().__init__(
            f"You've reached the {get_feature_name(feature)} limit for the {tier} tier "
            f"({format_limit(limit)}). Upgrade your plan to add more."
        )


def get_tier_features(tier):
    return TIER_FEATURES.get(tier) or TIER_FEATURES[DEFAULT_TIER]


def get_limit(tier, feature):
    return get_tier_features(tier).get(feature, 0)


def can_perform_action(tier, action):
    """True if the tier includes a boolean feature, or a non-zero limit."""
    value = get_tier_features(tier).get(action, False)
    if isinstance(value, bool):
        return value
    return value > 0


def has_reached_limit(tier, feature, current_count):
    limit = get_limit(tier, feature)
    if limit == UNLIMITED:
        return False
    return current_count >= limit


def get_feature_name(feature):
    return FEATURE_NAMES.get(feature, feature)


def format_limit(limit):
    if limit == UNLIMITED:
        return 'Unlimited'
    if isinstance(limit, bool):
        return 'Yes' if limit else 'No'
    return str(int(limit))


def check_limit(tier, feature, current_count):
    """Raise TierLimitError if one more item would go over the tier limit."""
    tier = tier if tier in TIER_FEATURES else DEFAULT_TIER
    if has_reached_limit(tier, feature, current_count):
        raise TierLimitError(tier, feature, get_limit(tier, feature))
