from flask import Blueprint, request, redirect, render_template, flash, abort
from flask_login import login_required, current_user

from services import (
    get_user_notifications, get_pending_shares, get_incoming_requests,
    mark_notification_read, mark_all_read, delete_notification,
)
from . import redirect_target

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('/')
@login_required
def notifications_index():
    only_unread = request.args.get('filter') == 'unread'
    notifications = get_user_notifications(current_user.id, limit=50, only_unread=only_unread)
    # Notifications for requests/shares that are still open get action buttons
    open_requests = {r.id for r in get_incoming_requests(current_user.id)}
    open_shares = {s.id for s in get_pending_shares(current_user.id)}
    return render_template('notifications.html',
                           notifications=notifications,
                           only_unread=only_unread,
                           open_requests=open_requests,
                           open_shares=open_shares)


@notifications_bp.route('/<int:notification_id>/read', methods=['POST'])
@login_required
def notification_read(notification_id):
    if not mark_notification_read(notification_id, current_user.id):
        abort(404)
    return redirect(redirect_target('notifications.notifications_index'))


@notifications_bp.route('/read-all', methods=['POST'])
@login_required
def notifications_read_all():
    count = mark_all_read(current_user.id)
    if count:
        flash(f'Marked {count} notification(s) as read.', 'info')
    return redirect(redirect_target('notifications.notifications_index'))


@notifications_bp.route('/<int:notification_id>/delete', methods=['POST'])
@login_required
def notification_delete(notification_id):
    if not delete_notification(notification_id, current_user.id):
        abort(404)
    return redirect(redirect_target('notifications.notifications_index'))
