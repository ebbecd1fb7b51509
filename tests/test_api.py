"""
Tests for the JSON API.
"""

import io
import os

from models import db, Recipe, User
from services import ocr, scraper
from services.scraper import ScrapeError


SCRAPED = {
    'name': 'Fish Tacos', 'servings': '4', 'prep_time': '10 mins', 'cook_time': '8 mins',
    'ingredients': [{'amount': '1', 'unit': 'lb', 'item': 'cod'}],
    'instructions': ['Grill the fish.'], 'image_url': '', 'categories': ['Dinner'],
    'source_url': 'https://example.com/tacos', 'source_name': 'example.com',
}


def test_endpoints_need_login(client):
    assert client.post('/api/scrape-recipe', json={'url': 'https://example.com'}).status_code == 401
    response = client.get('/api/recipes')
    assert response.status_code == 401
    assert response.get_json() == {'error': 'Authentication required'}


def test_scrape_recipe(client, login, make_user, monkeypatch):
    login(make_user('alice'))
    monkeypatch.setattr('routes.api.scrape_recipe', lambda url: dict(SCRAPED))

    response = client.post('/api/scrape-recipe', json={'url': 'https://example.com/tacos'})

    assert response.status_code == 200
    data = response.get_json()
    assert data['name'] == 'Fish Tacos'
    assert data['prepTime'] == '10 mins'
    assert data['sourceName'] == 'example.com'
    assert data['ingredients'] == [{'amount': '1', 'unit': 'lb', 'item': 'cod'}]


def test_scrape_recipe_errors(client, login, make_user, monkeypatch):
    login(make_user('alice'))
    assert client.post('/api/scrape-recipe', json={}).status_code == 400

    def fail(url):
        raise ScrapeError(scraper.NOT_FOUND_MESSAGE)

    monkeypatch.setattr('routes.api.scrape_recipe', fail)
    response = client.post('/api/scrape-recipe', json={'url': 'https://example.com/nothing'})
    assert response.status_code == 500
    assert response.get_json()['error'] == scraper.NOT_FOUND_MESSAGE


def test_vision_to_recipe(client, login, make_user, monkeypatch, png_bytes, vision_client):
    login(make_user('alice'))
    text = 'Pancakes\nIngredients\n1 cup flour\n1 egg\nInstructions\n1. Whisk.\n2. Fry.'
    monkeypatch.setattr(ocr, 'get_vision_client', lambda: vision_client(text=text))

    response = client.post('/api/vision-to-recipe',
                           data={'file': (io.BytesIO(png_bytes()), 'card.png')},
                           content_type='multipart/form-data')

    assert response.status_code == 200
    data = response.get_json()
    assert data['rawText'] == text
    assert data['traceId'].startswith('vision-req-')
    assert data['recipe']['name'] == 'Pancakes'
    assert data['recipe']['ingredients'][0] == {'amount': '1', 'unit': 'cup', 'item': 'flour', 'groupName': ''}
    assert data['recipe']['instructions'] == ['Whisk.', 'Fry.']


def test_vision_to_recipe_errors(client, login, make_user, monkeypatch, png_bytes, vision_client):
    login(make_user('alice'))

    response = client.post('/api/vision-to-recipe', data={}, content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'No file received'

    monkeypatch.setattr(ocr, 'get_vision_client', lambda: vision_client(text=None))
    response = client.post('/api/vision-to-recipe',
                           data={'file': (io.BytesIO(png_bytes()), 'blank.png')},
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'No text detected' in response.get_json()['error']
    assert response.get_json()['traceId'].startswith('vision-req-')


def test_check_scan_setup(client):
    data = client.get('/api/check-recipe-scan-setup').get_json()
    assert data['ready'] is False
    assert data['setupStatus']['googleVision']['status'] == 'Not configured'


def test_upload_and_delete_image(app, client, login, make_user, png_bytes):
    login(make_user('alice'))

    response = client.post('/api/upload-image',
                           data={'file': (io.BytesIO(png_bytes()), 'dish.png')},
                           content_type='multipart/form-data')
    assert response.status_code == 200
    image_url = response.get_json()['imageUrl']
    filename = image_url.rsplit('/', 1)[1]
    assert filename in os.listdir(app.config['UPLOAD_FOLDER'])

    assert client.get(image_url).status_code == 200

    response = client.post('/api/delete-image', json={'imageUrl': image_url})
    assert response.get_json() == {'success': True}
    assert filename not in os.listdir(app.config['UPLOAD_FOLDER'])


def test_upload_rejects_non_images(client, login, make_user):
    login(make_user('alice'))
    response = client.post('/api/upload-image',
                           data={'file': (io.BytesIO(b'hello'), 'notes.txt')},
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'Invalid file type' in response.get_json()['error']


def test_delete_image_in_use_by_someone_else(client, login, make_user, make_recipe):
    alice, bob = make_user('alice'), make_user('bob')
    make_recipe(alice, image_url='/uploads/shared.webp')
    login(bob)

    response = client.post('/api/delete-image', json={'imageUrl': '/uploads/shared.webp'})
    assert response.status_code == 403


def test_list_recipes(client, login, make_user, make_recipe):
    alice = make_user('alice')
    ids = [make_recipe(alice, name=f'Dish {i}').id for i in range(3)]
    login(alice)

    data = client.get('/api/recipes?limit=2').get_json()
    assert [r['id'] for r in data['recipes']] == [ids[2], ids[1]]
    assert data['lastId'] == ids[1]
    assert data['recipes'][0]['ingredients'][0]['item'] == 'flour'

    data = client.get(f"/api/recipes?limit=2&after={data['lastId']}").get_json()
    assert [r['id'] for r in data['recipes']] == [ids[0]]
    assert data['lastId'] is None

    # Out of range limits are clamped
    data = client.get('/api/recipes?limit=-5').get_json()
    assert [r['id'] for r in data['recipes']] == [ids[2]]
    assert data['lastId'] == ids[2]


def test_delete_recipe(client, login, make_user, make_recipe):
    alice, bob = make_user('alice'), make_user('bob')
    recipe_id = make_recipe(alice).id
    login(bob)

    response = client.delete('/api/recipes/delete', json={'recipeId': recipe_id})
    assert response.status_code == 403
    assert response.get_json() == {'error': 'Unauthorized to delete this recipe'}

    login(alice)
    response = client.delete('/api/recipes/delete', json={'recipeId': recipe_id})
    assert response.status_code == 200
    assert response.get_json() == {'message': 'Recipe deleted successfully'}
    assert db.session.get(Recipe, recipe_id) is None

    assert client.delete('/api/recipes/delete', json={}).status_code == 400


def test_search_users(client, make_user):
    make_user('bob')
    make_user('bobby')
    make_user('carol')

    data = client.get('/api/users/search?q=bob').get_json()
    assert sorted(u['email'] for u in data) == ['bob@example.com', 'bobby@example.com']
    assert set(data[0]) == {'id', 'email', 'displayName', 'photoURL'}
    assert client.get('/api/users/search?q=b').get_json() == []


def test_update_tier(client, login, make_user):
    alice, bob = make_user('alice'), make_user('bob')
    login(alice)

    response = client.put('/api/users/update-tier', json={'userId': alice.id, 'tier': 'Pro'})
    assert response.status_code == 200
    assert response.get_json()['message'] == 'User tier updated to Pro'
    assert db.session.get(User, alice.id).tier == 'Pro'

    response = client.put('/api/users/update-tier', json={'userId': bob.id, 'tier': 'Pro'})
    assert response.status_code == 403

    response = client.put('/api/users/update-tier', json={'userId': alice.id, 'tier': 'Platinum'})
    assert response.status_code == 400

    # Missing tier resets to the default
    client.put('/api/users/update-tier', json={'userId': alice.id})
    assert db.session.get(User, alice.id).tier == 'Free'


def test_admin_can_update_any_tier(client, login, make_user):
    admin, bob = make_user('admin', role='admin'), make_user('bob')
    login(admin)
    response = client.put('/api/users/update-tier', json={'userId': bob.id, 'tier': 'Beta Tester'})
    assert response.status_code == 200
    assert db.session.get(User, bob.id).tier == 'Beta Tester'


def test_migrate_recipe_visibility(client, make_user, make_recipe):
    owner = make_user('owner', recipe_visibility='friends')
    recipe = make_recipe(owner)
    recipe.visibility = None
    db.session.commit()

    response = client.get('/api/admin/migrate-recipe-visibility?secret=wrong')
    assert response.status_code == 401

    response = client.get('/api/admin/migrate-recipe-visibility?secret=test-secret')
    assert response.get_json() == {'message': 'Successfully migrated 1 recipes', 'migratedCount': 1}
    assert db.session.get(Recipe, recipe.id).visibility == 'friends'

    response = client.get('/api/admin/migrate-recipe-visibility?secret=test-secret')
    assert response.get_json()['migratedCount'] == 0


def test_set_admin_role(client, make_user):
    user = make_user('alice')

    assert client.post('/api/admin/set-admin-role', json={'secret': 'test-secret'}).status_code == 400
    response = client.post('/api/admin/set-admin-role', json={'userId': user.id, 'secret': 'nope'})
    assert response.status_code == 401

    response = client.post('/api/admin/set-admin-role', json={'userId': user.id, 'secret': 'test-secret'})
    assert response.status_code == 200
    assert db.session.get(User, user.id).is_admin


def test_check_recipe(client, make_user, make_recipe):
    owner = make_user('owner')
    recipe = make_recipe(owner, visibility='friends')

    assert client.get(f'/api/admin/check-recipe?id={recipe.id}').status_code == 401

    data = client.get(f'/api/admin/check-recipe?id={recipe.id}&secret=test-secret').get_json()
    assert data['effectiveVisibility'] == 'friends'
    assert data['publiclyVisible'] is False
    assert client.get('/api/admin/check-recipe?id=9999&secret=test-secret').status_code == 404
