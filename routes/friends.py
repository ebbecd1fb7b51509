from flask import Blueprint, request, redirect, render_template, flash
from flask_login import login_required, current_user

from services import (
    send_friend_request, accept_friend_request, reject_friend_request, cancel_friend_request,
    remove_friend, follow_user, unfollow_user, accept_shared_recipe, reject_shared_recipe,
    get_friends, get_incoming_requests, get_outgoing_requests, get_pending_shares,
    get_following, get_followers, search_users, SocialError, TierLimitError,
)
from . import redirect_target

friends_bp = Blueprint('friends', __name__)

SOCIAL_ERRORS = (SocialError, TierLimitError)


@friends_bp.route('/')
@login_required
def friends_index():
    q = request.args.get('q', '').strip()
    results = search_users(q, current_user, exclude_connected=True) if q else []
    return render_template('friends.html',
                           friends=get_friends(current_user.id),
                           incoming=get_incoming_requests(current_user.id),
                           outgoing=get_outgoing_requests(current_user.id),
                           shares=get_pending_shares(current_user.id),
                           following=get_following(current_user.id),
                           followers=get_followers(current_user.id),
                           q=q,
                           results=results)


@friends_bp.route('/request/<int:user_id>', methods=['POST'])
@login_required
def friend_request_send(user_id):
    try:
        send_friend_request(current_user, user_id)
        flash('Friend request sent!', 'success')
    except SOCIAL_ERRORS as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('friends.friends_index'))


@friends_bp.route('/requests/<int:request_id>/accept', methods=['POST'])
@login_required
def friend_request_accept(request_id):
    try:
        sender = accept_friend_request(request_id, current_user)
        flash(f'You are now friends with {sender.name}!', 'success')
    except SOCIAL_ERRORS as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('friends.friends_index'))


@friends_bp.route('/requests/<int:request_id>/reject', methods=['POST'])
@login_required
def friend_request_reject(request_id):
    try:
        reject_friend_request(request_id, current_user)
        flash('Friend request declined.', 'info')
    except SocialError as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('friends.friends_index'))


@friends_bp.route('/requests/<int:request_id>/cancel', methods=['POST'])
@login_required
def friend_request_cancel(request_id):
    try:
        cancel_friend_request(request_id, current_user)
        flash('Friend request cancelled.', 'info')
    except SocialError as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('friends.friends_index'))


@friends_bp.route('/<int:user_id>/remove', methods=['POST'])
@login_required
def friend_remove(user_id):
    try:
        remove_friend(current_user, user_id)
        flash('Friend removed.', 'info')
    except SocialError as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('friends.friends_index'))


@friends_bp.route('/follow/<int:user_id>', methods=['POST'])
@login_required
def follow(user_id):
    try:
        follow_user(current_user, user_id)
    except SocialError as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('profile.profile_view', user_id=user_id))


@friends_bp.route('/unfollow/<int:user_id>', methods=['POST'])
@login_required
def unfollow(user_id):
    unfollow_user(current_user, user_id)
    return redirect(redirect_target('profile.profile_view', user_id=user_id))


@friends_bp.route('/shares/<int:share_id>/accept', methods=['POST'])
@login_required
def share_accept(share_id):
    try:
        recipe = accept_shared_recipe(share_id, current_user)
        flash(f'"{recipe.name}" added to your recipes!', 'success')
    except SOCIAL_ERRORS as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('friends.friends_index'))


@friends_bp.route('/shares/<int:share_id>/reject', methods=['POST'])
@login_required
def share_reject(share_id):
    try:
        reject_shared_recipe(share_id, current_user)
        flash('Shared recipe declined.', 'info')
    except SocialError as e:
        flash(str(e), 'danger')
    return redirect(redirect_target('friends.friends_index'))
