"""
Tests for friend requests, follows and recipe sharing.
"""

import pytest

from constants import TIER_FEATURES
from models import db, FriendRequest, Friendship, Notification, Recipe
from services import (
    SocialError, TierLimitError, send_friend_request, accept_friend_request, reject_friend_request,
    cancel_friend_request, remove_friend, follow_user, unfollow_user, share_recipe,
    accept_shared_recipe, reject_shared_recipe, get_friends, get_followers, get_following,
    get_incoming_requests, get_outgoing_requests, get_pending_shares, search_users,
)
from services.visibility import are_friends


def make_friends(first, second):
    request = send_friend_request(first, second.id)
    accept_friend_request(request.id, second)


def test_friend_request_accept_flow(make_user):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')

    request = send_friend_request(alice, bob.id)
    assert get_outgoing_requests(alice.id) == [request]
    assert get_incoming_requests(bob.id) == [request]
    notice = Notification.query.filter_by(user_id=bob.id).one()
    assert notice.type == 'friend_request'
    assert notice.related_item_id == request.id
    assert notice.from_user_name == 'Alice'

    sender = accept_friend_request(request.id, bob)

    assert sender.id == alice.id
    assert are_friends(alice.id, bob.id)
    assert Friendship.query.count() == 1
    assert FriendRequest.query.count() == 0
    # The request notice is gone; alice hears about the acceptance
    assert Notification.query.filter_by(type='friend_request').count() == 0
    assert Notification.query.filter_by(user_id=alice.id, type='friend_accept').count() == 1
    assert [u.id for u in get_friends(alice.id)] == [bob.id]
    assert [u.id for u in get_friends(bob.id)] == [alice.id]


def test_friend_request_rules(make_user):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')

    with pytest.raises(SocialError, match='yourself'):
        send_friend_request(alice, alice.id)
    with pytest.raises(SocialError) as exc:
        send_friend_request(alice, 9999)
    assert exc.value.status == 404

    send_friend_request(alice, bob.id)
    with pytest.raises(SocialError, match='already exists'):
        send_friend_request(alice, bob.id)
    # The reverse direction counts as a duplicate too
    with pytest.raises(SocialError, match='already exists'):
        send_friend_request(bob, alice.id)


def test_cannot_request_existing_friend(make_user):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    make_friends(alice, bob)
    with pytest.raises(SocialError, match='already friends'):
        send_friend_request(bob, alice.id)


def test_free_tier_cannot_add_friends(make_user):
    alice, bob = make_user('alice'), make_user('bob', tier='Pro')
    with pytest.raises(TierLimitError):
        send_friend_request(alice, bob.id)
    assert FriendRequest.query.count() == 0


def test_accept_checks_sender_friend_limit(make_user, monkeypatch):
    monkeypatch.setitem(TIER_FEATURES['Pro'], 'max_friends', 1)
    alice = make_user('alice', tier='Pro')
    bob, carol = make_user('bob', tier='Beta Tester'), make_user('carol', tier='Beta Tester')

    first = send_friend_request(alice, bob.id)
    second = send_friend_request(alice, carol.id)
    accept_friend_request(first.id, bob)

    with pytest.raises(TierLimitError):
        accept_friend_request(second.id, carol)
    assert not are_friends(alice.id, carol.id)
    assert get_incoming_requests(carol.id) == [second]


def test_only_receiver_accepts(make_user):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    request = send_friend_request(alice, bob.id)

    with pytest.raises(SocialError) as exc:
        accept_friend_request(request.id, alice)
    assert exc.value.status == 403
    assert not are_friends(alice.id, bob.id)


def test_reject_and_cancel(make_user):
    alice, bob, carol = (make_user('alice', tier='Pro'), make_user('bob', tier='Pro'),
                         make_user('carol', tier='Pro'))

    request = send_friend_request(alice, bob.id)
    reject_friend_request(request.id, bob)
    assert FriendRequest.query.count() == 0
    assert Notification.query.filter_by(type='friend_request').count() == 0

    request = send_friend_request(alice, carol.id)
    with pytest.raises(SocialError):
        cancel_friend_request(request.id, carol)
    cancel_friend_request(request.id, alice)
    assert FriendRequest.query.count() == 0

    with pytest.raises(SocialError) as exc:
        accept_friend_request(request.id, carol)
    assert exc.value.status == 404


def test_remove_friend(make_user):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    make_friends(alice, bob)

    remove_friend(bob, alice.id)
    assert not are_friends(alice.id, bob.id)
    with pytest.raises(SocialError):
        remove_friend(bob, alice.id)


def test_follow_and_unfollow(make_user):
    alice, bob = make_user('alice'), make_user('bob')

    follow_user(alice, bob.id)
    follow_user(alice, bob.id)
    assert [u.id for u in get_following(alice.id)] == [bob.id]
    assert [u.id for u in get_followers(bob.id)] == [alice.id]
    assert Notification.query.filter_by(user_id=bob.id, type='follow').count() == 1

    with pytest.raises(SocialError):
        follow_user(alice, alice.id)

    assert unfollow_user(alice, bob.id) is True
    assert unfollow_user(alice, bob.id) is False
    assert get_following(alice.id) == []


def test_share_recipe_and_accept(make_user, make_recipe):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    make_friends(alice, bob)
    recipe = make_recipe(alice, name='Paella', visibility='friends')

    share = share_recipe(alice, recipe.id, bob.id, message='You have to try this')
    assert share.recipe_name == 'Paella'
    notice = Notification.query.filter_by(user_id=bob.id, type='recipe_share').one()
    assert notice.related_item_id == share.id
    assert notice.related_item_name == 'Paella'
    assert notice.recipe_id == recipe.id

    with pytest.raises(SocialError, match='already shared'):
        share_recipe(alice, recipe.id, bob.id)

    copy = accept_shared_recipe(share.id, bob)
    assert copy.user_id == bob.id
    assert copy.original_creator_id == alice.id
    assert share.status == 'accepted'
    assert Notification.query.filter_by(type='recipe_share').count() == 0
    assert Recipe.query.filter_by(user_id=bob.id).count() == 1

    # Once handled, a share cannot be accepted again
    with pytest.raises(SocialError):
        accept_shared_recipe(share.id, bob)


def test_share_requires_friendship_and_visibility(make_user, make_recipe):
    alice, bob, carol = (make_user('alice', tier='Pro'), make_user('bob', tier='Pro'),
                         make_user('carol', tier='Pro'))
    make_friends(alice, bob)
    private = make_recipe(carol, name='Secret', visibility='private')
    mine = make_recipe(alice, name='Mine')

    with pytest.raises(SocialError) as exc:
        share_recipe(alice, mine.id, carol.id)
    assert exc.value.status == 403

    with pytest.raises(SocialError) as exc:
        share_recipe(alice, private.id, bob.id)
    assert exc.value.status == 404


def test_share_needs_receiver_to_see_others_recipe(make_user, make_recipe):
    owner, sam, rita = (make_user('owner', tier='Pro'), make_user('sam', tier='Pro'),
                        make_user('rita', tier='Pro'))
    make_friends(owner, sam)
    make_friends(sam, rita)
    recipe = make_recipe(owner, name='Family Stew', visibility='friends')

    with pytest.raises(SocialError) as exc:
        share_recipe(sam, recipe.id, rita.id)
    assert exc.value.status == 403
    assert get_pending_shares(rita.id) == []


def test_accept_rechecks_visibility(make_user, make_recipe):
    owner, sam, rita = (make_user('owner', tier='Pro'), make_user('sam', tier='Pro'),
                        make_user('rita', tier='Pro'))
    make_friends(owner, sam)
    make_friends(owner, rita)
    make_friends(sam, rita)
    recipe = make_recipe(owner, name='Family Stew', visibility='friends')
    share = share_recipe(sam, recipe.id, rita.id)

    recipe.visibility = 'private'
    db.session.commit()

    with pytest.raises(SocialError) as exc:
        accept_shared_recipe(share.id, rita)
    assert exc.value.status == 403
    assert Recipe.query.filter_by(user_id=rita.id).count() == 0


def test_owner_shares_private_recipe_with_friend(make_user, make_recipe):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    make_friends(alice, bob)
    recipe = make_recipe(alice, name='Secret Sauce', visibility='private')

    share = share_recipe(alice, recipe.id, bob.id)
    copy = accept_shared_recipe(share.id, bob)
    assert copy.name == 'Secret Sauce'


def test_reject_shared_recipe(make_user, make_recipe):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    make_friends(alice, bob)
    share = share_recipe(alice, make_recipe(alice).id, bob.id)

    with pytest.raises(SocialError) as exc:
        reject_shared_recipe(share.id, alice)
    assert exc.value.status == 403

    reject_shared_recipe(share.id, bob)
    assert share.status == 'rejected'
    assert get_pending_shares(bob.id) == []
    assert Notification.query.filter_by(type='recipe_share').count() == 0
    assert Recipe.query.filter_by(user_id=bob.id).count() == 0


def test_share_limit(make_user, make_recipe):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    make_friends(alice, bob)
    alice.tier = 'Free'
    db.session.commit()

    for i in range(3):
        share_recipe(alice, make_recipe(alice, name=f'Dish {i}').id, bob.id)
    with pytest.raises(TierLimitError):
        share_recipe(alice, make_recipe(alice, name='Dish 4').id, bob.id)


def test_search_users(make_user):
    alice = make_user('alice', tier='Pro')
    bob = make_user('bob', tier='Pro')
    make_user('bobby')
    make_user('carol')

    assert search_users('b') == []
    assert sorted(u.email for u in search_users('BOB')) == ['bob@example.com', 'bobby@example.com']
    # The viewer never finds themselves
    assert [u.email for u in search_users('alice', alice)] == []

    send_friend_request(alice, bob.id)
    assert [u.email for u in search_users('bob', alice, exclude_connected=True)] == ['bobby@example.com']


def test_search_users_treats_wildcards_literally(make_user):
    make_user('bob')
    make_user('carol')
    make_user('jo_ann')

    assert search_users('%%') == []
    assert search_users('__') == []
    assert [u.email for u in search_users('o_a')] == ['jo_ann@example.com']
