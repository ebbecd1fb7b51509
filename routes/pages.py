from flask import Blueprint, render_template
from flask_login import current_user

from constants import TIER_FEATURES, FEATURE_NAMES, VALID_TIERS
from services import get_user_recipes, get_user_stats, get_pending_shares
from services.tiers import format_limit

pages_bp = Blueprint('pages', __name__)

# Shown on the pricing page; no payment is taken
TIER_PRICES = {'Free': '$0', 'Pro': '$4.99 / month or $23.00 / year', 'Beta Tester': 'Invite only'}


@pages_bp.route('/')
def index():
    if not current_user.is_authenticated:
        return render_template('index.html')

    recipes, _ = get_user_recipes(current_user.id, limit=6)
    return render_template('index.html',
                           recipes=recipes,
                           stats=get_user_stats(current_user.id),
                           shares=get_pending_shares(current_user.id))


@pages_bp.route('/pricing')
def pricing():
    tiers = []
    for tier in VALID_TIERS:
        features = TIER_FEATURES[tier]
        tiers.append({
            'name': tier,
            'price': TIER_PRICES.get(tier, ''),
            'features': [(FEATURE_NAMES[key], format_limit(value)) for key, value in features.items()],
        })
    current_tier = current_user.tier if current_user.is_authenticated else None
    return render_template('pricing.html', tiers=tiers, current_tier=current_tier)
