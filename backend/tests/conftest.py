"""
Shared fixtures.

Every test gets a fresh app on an in-memory SQLite database. Fixtures that
create rows do so inside a short-lived app context and hand back plain ids,
so no ORM object outlives the session that loaded it and each test-client
request runs in its own session, the way production requests do.
"""
import itertools

import pytest
from flask_jwt_extended import create_access_token

from dropstream import create_app
from dropstream.extensions import db
from dropstream.models.asset import Asset
from dropstream.models.bookmark import StreamBookmark
from dropstream.models.drop import Drop
from dropstream.models.drop_block import DropBlock
from dropstream.models.gallery_image import GalleryImage
from dropstream.models.stream import AssetStream, Stream, StreamMember
from dropstream.models.user import User


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Creates committed rows and returns their ids."""

    def __init__(self, app):
        self.app = app
        self._seq = itertools.count(1)

    def _save(self, obj):
        with self.app.app_context():
            db.session.add(obj)
            db.session.commit()
            return obj.id

    def user(self, role="user", password="secret123"):
        n = next(self._seq)
        user = User(
            username=f"user{n}",
            display_name=f"User {n}",
            email=f"user{n}@example.com",
            platform_role=role,
        )
        user.set_password(password)
        return self._save(user)

    def asset(self, uploader_id, title=None):
        n = next(self._seq)
        return self._save(Asset(
            title=title or f"asset {n}",
            url=f"https://cdn.example.com/{n}.jpg",
            asset_type="image",
            uploader_id=uploader_id,
        ))

    def drop(self, created_by, status="draft", title="A drop"):
        return self._save(Drop(title=title, status=status, created_by=created_by))

    def block(self, drop_id, position, type="text", **fields):
        return self._save(DropBlock(drop_id=drop_id, position=position, type=type, **fields))

    def gallery_image(self, block_id, asset_id, position):
        return self._save(GalleryImage(block_id=block_id, asset_id=asset_id, position=position))

    def stream(self, owner_id, name=None):
        n = next(self._seq)
        return self._save(Stream(name=name or f"stream-{n}", owner_type="user", owner_id=owner_id))

    def tag(self, stream_id, asset_id, added_by=None):
        return self._save(AssetStream(stream_id=stream_id, asset_id=asset_id, added_by=added_by))

    def member(self, stream_id, user_id, role="member"):
        return self._save(StreamMember(stream_id=stream_id, user_id=user_id, role=role))

    def bookmark(self, stream_id, created_by, position, url=None):
        n = next(self._seq)
        return self._save(StreamBookmark(
            stream_id=stream_id,
            created_by=created_by,
            position=position,
            url=url or f"https://example.com/{n}",
        ))


@pytest.fixture
def factory(app):
    return Factory(app)


@pytest.fixture
def auth(app):
    def headers(user_id):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return headers


@pytest.fixture
def user_id(factory):
    return factory.user()


@pytest.fixture
def owner_id(factory):
    return factory.user(role="owner")


@pytest.fixture
def admin_id(factory):
    return factory.user(role="admin")
