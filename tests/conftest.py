import os

# Must be set before the app module is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CLASSIFIER_BACKEND"] = "vader"

from datetime import datetime

import pytest

from aggregates import MoodEntry


@pytest.fixture
def flask_app():
    from app import app
    from models import db

    app.config["TESTING"] = True
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture
def make_entry():
    counter = iter(range(1, 10_000))

    def _make(mood, created_at, confidence=1.0, user_id="u1", text="..."):
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return MoodEntry(next(counter), user_id, text, mood, confidence, created_at)

    return _make
