"""
Tests for the HTML pages: auth, recipe forms, profiles and the social pages.
"""

import io

from models import db, FriendRequest, Recipe, User
from services import ocr
from services.visibility import are_friends


def test_home_page_anonymous(client):
    response = client.get('/')
    assert response.status_code == 200
    assert 'Every recipe, one box.' in response.get_data(as_text=True)


def test_pricing_page(client):
    body = client.get('/pricing').get_data(as_text=True)
    assert 'Beta Tester' in body
    assert 'Unlimited' in body


def test_signup_login_logout(client):
    response = client.post('/signup', data={
        'display_name': 'Dana', 'email': 'dana@example.com',
        'password': 'password123', 'confirm_password': 'password123',
    })
    assert response.status_code == 302
    assert User.query.filter_by(email='dana@example.com').count() == 1
    assert 'Welcome back, Dana' in client.get('/').get_data(as_text=True)

    assert client.get('/logout').status_code == 302
    assert 'Every recipe, one box.' in client.get('/').get_data(as_text=True)

    response = client.post('/login', data={'email': 'dana@example.com', 'password': 'wrong-password'})
    assert 'Invalid email or password.' in response.get_data(as_text=True)

    response = client.post('/login?next=/recipes/',
                           data={'email': 'DANA@example.com', 'password': 'password123'})
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/recipes/')


def test_signup_password_mismatch(client):
    response = client.post('/signup', data={
        'email': 'dana@example.com', 'password': 'password123', 'confirm_password': 'password124',
    })
    assert 'Passwords do not match.' in response.get_data(as_text=True)
    assert User.query.count() == 0


def test_login_redirects_external_next(client, make_user):
    make_user('alice')
    response = client.post('/login', data={
        'email': 'alice@example.com', 'password': 'password123', 'next': 'https://evil.example.com/',
    })
    assert response.status_code == 302
    assert 'evil.example.com' not in response.headers['Location']


def test_recipes_require_login(client):
    response = client.get('/recipes/')
    assert response.status_code == 302
    assert '/login' in response.headers['Location']


def test_add_recipe_form(client, login, make_user):
    alice = make_user('alice')
    login(alice)

    response = client.post('/recipes/add', data={
        'name': 'Tomato Soup',
        'servings': '4',
        'visibility': 'private',
        'ingredients_text': '2 cups tomatoes\n1 tsp salt',
        'instructions_text': 'Simmer the tomatoes.\nBlend until smooth.',
        'categories': ['Dinner'],
        'new_categories': 'Soup',
    })

    recipe = Recipe.query.filter_by(user_id=alice.id).one()
    assert response.status_code == 302
    assert response.headers['Location'].endswith(f'/recipes/{recipe.id}')
    assert recipe.visibility == 'private'
    assert [i.item for i in recipe.ingredients] == ['tomatoes', 'salt']
    assert len(recipe.instructions) == 2
    assert 'Dinner' in recipe.categories and 'Soup' in recipe.categories

    body = client.get(f'/recipes/{recipe.id}').get_data(as_text=True)
    assert 'Tomato Soup' in body
    assert 'tomatoes' in body


def test_add_recipe_without_name_shows_form(client, login, make_user):
    login(make_user('alice'))
    response = client.post('/recipes/add', data={'ingredients_text': '1 egg'})
    assert response.status_code == 200
    assert 'Add Recipe' in response.get_data(as_text=True)
    assert Recipe.query.count() == 0


def test_recipe_list_page(client, login, make_user, make_recipe):
    alice = make_user('alice')
    make_recipe(alice, name='Banana Bread', categories=['Dessert'])
    make_recipe(alice, name='Chili', categories=['Dinner'])
    login(alice)

    body = client.get('/recipes/').get_data(as_text=True)
    assert 'Banana Bread' in body and 'Chili' in body

    body = client.get('/recipes/?category=Dessert').get_data(as_text=True)
    assert 'Banana Bread' in body
    assert 'Chili' not in body


def test_private_recipe_is_forbidden(client, login, make_user, make_recipe):
    owner, stranger = make_user('owner'), make_user('stranger')
    recipe = make_recipe(owner, visibility='private')
    login(stranger)

    assert client.get(f'/recipes/{recipe.id}').status_code == 403
    assert client.get(f'/recipes/{recipe.id}/edit').status_code == 403
    assert client.post(f'/recipes/{recipe.id}/edit', data={'name': 'Mine now'}).status_code == 403
    assert client.post(f'/recipes/{recipe.id}/delete').status_code == 403
    assert db.session.get(Recipe, recipe.id).name == 'Pancakes'


def test_public_recipe_visible_anonymously(client, make_user, make_recipe):
    recipe = make_recipe(make_user('owner'), name='Open Sandwich', visibility='public')
    body = client.get(f'/recipes/{recipe.id}').get_data(as_text=True)
    assert 'Open Sandwich' in body


def test_missing_recipe_is_404(client):
    assert client.get('/recipes/9999').status_code == 404


def test_edit_and_delete_recipe(client, login, make_user, make_recipe):
    alice = make_user('alice')
    recipe_id = make_recipe(alice).id
    login(alice)

    response = client.post(f'/recipes/{recipe_id}/edit', data={
        'name': 'Buttermilk Pancakes',
        'ingredients_text': '2 cups buttermilk',
        'instructions_text': 'Whisk and fry.',
    })
    assert response.status_code == 302
    recipe = db.session.get(Recipe, recipe_id)
    assert recipe.name == 'Buttermilk Pancakes'
    assert [i.item for i in recipe.ingredients] == ['buttermilk']

    response = client.post(f'/recipes/{recipe_id}/delete')
    assert response.status_code == 302
    assert db.session.get(Recipe, recipe_id) is None


def test_import_recipe_prefills_form(client, login, make_user, monkeypatch):
    login(make_user('alice'))
    scraped = {
        'name': 'Fish Tacos', 'servings': '4', 'prep_time': '10 mins', 'cook_time': '8 mins',
        'ingredients': [{'amount': '1', 'unit': 'lb', 'item': 'cod'}],
        'instructions': ['Grill the fish.'], 'image_url': '', 'categories': ['Dinner'],
        'source_url': 'https://example.com/tacos', 'source_name': 'example.com',
    }
    monkeypatch.setattr('routes.recipes.scrape_recipe', lambda url: dict(scraped))

    response = client.post('/recipes/import', data={'url': 'https://example.com/tacos'})

    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert 'Fish Tacos' in body
    assert 'Grill the fish.' in body
    assert Recipe.query.count() == 0


def test_scan_recipe_prefills_form(client, login, make_user, monkeypatch, png_bytes, vision_client):
    login(make_user('alice'))
    text = 'Lemon Cake\nIngredients\n2 cups flour\nInstructions\n1. Bake for 30 minutes.'
    monkeypatch.setattr(ocr, 'get_vision_client', lambda: vision_client(text=text))

    response = client.post('/recipes/scan',
                           data={'file': (io.BytesIO(png_bytes()), 'card.png')},
                           content_type='multipart/form-data')

    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert 'Lemon Cake' in body
    assert 'Bake for 30 minutes.' in body


def test_private_profile(client, login, make_user, make_recipe):
    owner = make_user('owner', profile_visibility='private')
    make_recipe(owner, name='Hidden Stew')
    login(make_user('stranger'))

    body = client.get(f'/profile/{owner.id}').get_data(as_text=True)
    assert 'This profile is private.' in body
    assert 'Hidden Stew' not in body


def test_public_profile_hides_private_recipes(client, make_user, make_recipe):
    owner = make_user('owner')
    make_recipe(owner, name='Open Stew', visibility='public')
    make_recipe(owner, name='Secret Stew', visibility='private')

    body = client.get(f'/profile/{owner.id}').get_data(as_text=True)
    assert 'Open Stew' in body
    assert 'Secret Stew' not in body


def test_edit_profile(client, login, make_user):
    alice = make_user('alice')
    login(alice)

    response = client.post('/profile/edit', data={
        'display_name': 'Chef Alice',
        'bio': 'Soup every day.',
        'profile_visibility': 'private',
        'friends_visibility': 'public',
        'recipe_visibility': 'friends',
        'custom_categories': 'Soup, Bread',
    })

    assert response.status_code == 302
    user = db.session.get(User, alice.id)
    assert user.display_name == 'Chef Alice'
    assert user.profile_visibility == 'private'
    assert user.recipe_visibility == 'friends'
    assert user.custom_categories == ['Soup', 'Bread']


def test_friend_request_through_notifications(client, login, make_user):
    alice, bob = make_user('alice', tier='Pro'), make_user('bob', tier='Pro')
    login(alice)
    response = client.post(f'/friends/request/{bob.id}', data={'next': f'/profile/{bob.id}'})
    assert response.headers['Location'].endswith(f'/profile/{bob.id}')

    login(bob)
    body = client.get('/notifications/').get_data(as_text=True)
    assert 'sent you a friend request.' in body

    request_id = FriendRequest.query.filter_by(sender_id=alice.id).one().id
    response = client.post(f'/friends/requests/{request_id}/accept', data={'next': '/notifications/'})
    assert response.headers['Location'].endswith('/notifications/')
    assert are_friends(alice.id, bob.id)

    body = client.get('/friends/').get_data(as_text=True)
    assert 'Friends (1)' in body


def test_friends_search(client, login, make_user):
    make_user('bob')
    login(make_user('alice'))
    body = client.get('/friends/?q=bob').get_data(as_text=True)
    assert 'Search results' in body
    assert '>Bob</a>' in body


def test_notifications_mark_all_read(client, login, make_user):
    alice, bob = make_user('alice'), make_user('bob')
    login(alice)
    client.post(f'/friends/follow/{bob.id}')

    login(bob)
    assert 'started following you.' in client.get('/notifications/').get_data(as_text=True)
    response = client.post('/notifications/read-all')
    assert response.status_code == 302
    assert 'Nothing here yet.' in client.get('/notifications/?filter=unread').get_data(as_text=True)


def test_admin_migrate_page(client, make_user, make_recipe):
    owner = make_user('owner')
    recipe = make_recipe(owner)
    recipe.visibility = None
    db.session.commit()

    assert client.post('/admin/migrate', data={'secret': 'wrong'}).status_code == 401

    response = client.post('/admin/migrate', data={'secret': 'test-secret'})
    assert response.status_code == 200
    assert 'Updated 1 recipe(s).' in response.get_data(as_text=True)
    assert db.session.get(Recipe, recipe.id).visibility == 'public'
