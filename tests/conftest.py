"""
Shared fixtures: an app on an in-memory database, a test client and
helpers for creating users and signing them in.
"""

import io
import os
import sys

import pytest
from flask import g
from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app  # noqa: E402
from models import db  # noqa: E402
from services import create_user, create_recipe  # noqa: E402


@pytest.fixture
def app(tmp_path):
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(name=None, tier='Free', **settings):
        counter['n'] += 1
        name = name or f"user{counter['n']}"
        user = create_user(f'{name}@example.com', 'password123', display_name=name.title())
        user.tier = tier
        for key, value in settings.items():
            setattr(user, key, value)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def make_recipe(app):
    def _make_recipe(owner, name='Pancakes', **data):
        data.setdefault('ingredients', [{'amount': '2', 'unit': 'cups', 'item': 'flour'}])
        data.setdefault('instructions', ['Mix everything.', 'Cook on a hot griddle.'])
        return create_recipe(owner, dict(data, name=name))
    return _make_recipe


@pytest.fixture
def login(client):
    def _login(user):
        with client.session_transaction() as sess:
            sess['_user_id'] = str(user.id)
            sess['_fresh'] = True
        # The app context outlives each request, so drop any cached user
        g.pop('_login_user', None)
    return _login


@pytest.fixture
def png_bytes():
    def _png(width=40, height=20, color=(200, 40, 40)):
        buf = io.BytesIO()
        Image.new('RGB', (width, height), color).save(buf, 'PNG')
        return buf.getvalue()
    return _png


class FakeVisionResponse:
    def __init__(self, text=None, error_message=''):
        self.error = type('Status', (), {'message': error_message})()
        self.text_annotations = [type('Annotation', (), {'description': text})()] if text else []


class FakeVisionClient:
    """Stands in for vision.ImageAnnotatorClient in tests."""

    def __init__(self, text=None, error_message=''):
        self.response = FakeVisionResponse(text, error_message)
        self.calls = 0

    def text_detection(self, image):
        self.calls += 1
        return self.response


@pytest.fixture
def vision_client():
    return FakeVisionClient
