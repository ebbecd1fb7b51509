"""
Services Package

Business logic modules for the recipe application.
"""

from .parsing import (
    float_to_fraction,
    format_amount,
    normalize_fractions,
    parse_fraction,
    parse_ingredient,
    parse_instruction,
    parse_bulk_ingredients,
    parse_bulk_instructions,
    parse_recipe_text,
)

from .tiers import (
    TierLimitError,
    can_perform_action,
    has_reached_limit,
    get_feature_name,
    check_limit,
)

from .notifications import (
    create_notification,
    get_user_notifications,
    get_unread_count,
    mark_notification_read,
    mark_all_read,
    delete_notification,
    delete_notifications_for,
)

from .visibility import (
    effective_recipe_visibility,
    get_relationship,
    can_view_recipe,
    can_edit_recipe,
    can_view_profile,
    can_view_friends_list,
    visible_recipes_query,
    backfill_recipe_visibility,
)

from .recipes import (
    RecipeError,
    create_recipe,
    update_recipe,
    delete_recipe,
    copy_recipe,
    get_user_recipes,
    get_user_recipe_count,
    get_user_stats,
    get_recipe_categories,
)

from .users import (
    UserError,
    create_user,
    authenticate,
    update_profile,
    update_tier,
    set_admin_role,
    get_user,
)

from .social import (
    SocialError,
    send_friend_request,
    accept_friend_request,
    reject_friend_request,
    cancel_friend_request,
    remove_friend,
    follow_user,
    unfollow_user,
    share_recipe,
    accept_shared_recipe,
    reject_shared_recipe,
    get_friends,
    get_incoming_requests,
    get_outgoing_requests,
    get_pending_shares,
    get_following,
    get_followers,
    search_users,
)

from .scraper import ScrapeError, scrape_recipe
from .ocr import OCRError, extract_text, image_to_recipe, scan_setup_status

__all__ = [
    # Parsing
    'float_to_fraction',
    'format_amount',
    'normalize_fractions',
    'parse_fraction',
    'parse_ingredient',
    'parse_instruction',
    'parse_bulk_ingredients',
    'parse_bulk_instructions',
    'parse_recipe_text',
    # Tiers
    'TierLimitError',
    'can_perform_action',
    'has_reached_limit',
    'get_feature_name',
    'check_limit',
    # Notifications
    'create_notification',
    'get_user_notifications',
    'get_unread_count',
    'mark_notification_read',
    'mark_all_read',
    'delete_notification',
    'delete_notifications_for',
    # Visibility
    'effective_recipe_visibility',
    'get_relationship',
    'can_view_recipe',
    'can_edit_recipe',
    'can_view_profile',
    'can_view_friends_list',
    'visible_recipes_query',
    'backfill_recipe_visibility',
    # Recipes
    'RecipeError',
    'create_recipe',
    'update_recipe',
    'delete_recipe',
    'copy_recipe',
    'get_user_recipes',
    'get_user_recipe_count',
    'get_user_stats',
    'get_recipe_categories',
    # Users
    'UserError',
    'create_user',
    'authenticate',
    'update_profile',
    'update_tier',
    'set_admin_role',
    'get_user',
    # Social
    'SocialError',
    'send_friend_request',
    'accept_friend_request',
    'reject_friend_request',
    'cancel_friend_request',
    'remove_friend',
    'follow_user',
    'unfollow_user',
    'share_recipe',
    'accept_shared_recipe',
    'reject_shared_recipe',
    'get_friends',
    'get_incoming_requests',
    'get_outgoing_requests',
    'get_pending_shares',
    'get_following',
    'get_followers',
    'search_users',
    # Import
    'ScrapeError',
    'scrape_recipe',
    'OCRError',
    'extract_text',
    'image_to_recipe',
    'scan_setup_status',
]
