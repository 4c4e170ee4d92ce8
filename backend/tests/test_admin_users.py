"""
Admin user management and ownership transfer.

Covers:
  - listing is admin-only, filterable by role
  - plain role changes
  - owner cannot be demoted directly
  - transfer: success, rolled back when promotion fails, critical when the
    compensating re-promotion fails too
  - delete rules, and the orderings a deleted user leaves behind
"""
import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from dropstream.application.admin import users as users_service
from dropstream.application.drops.blocks import drop_blocks
from dropstream.application.drops.gallery import gallery_images
from dropstream.application.streams.bookmarks import stream_bookmarks
from dropstream.extensions import db
from dropstream.models.asset import Asset
from dropstream.models.drop import Drop
from dropstream.models.stream import AssetStream, StreamMember


def _role(client, auth, owner_id, user_id):
    res = client.get("/api/v1/admin/users", query_string={"limit": 100}, headers=auth(owner_id))
    return {u["id"]: u["platform_role"] for u in res.get_json()["users"]}[user_id]


class TestListUsers:

    def test_regular_user_forbidden(self, client, auth, user_id):
        res = client.get("/api/v1/admin/users", headers=auth(user_id))
        assert res.status_code == 403
        assert res.get_json()["error"] == "Admin access required"

    def test_filter_by_role(self, client, auth, admin_id, owner_id, user_id):
        res = client.get("/api/v1/admin/users", query_string={"role": "admin"}, headers=auth(admin_id))

        assert res.status_code == 200
        body = res.get_json()
        assert [u["id"] for u in body["users"]] == [admin_id]
        assert body["pagination"]["total"] == 1

    def test_invalid_role_filter(self, client, auth, admin_id):
        res = client.get("/api/v1/admin/users", query_string={"role": "root"}, headers=auth(admin_id))
        assert res.status_code == 400


class TestChangeRole:

    def test_only_owner(self, client, auth, admin_id, user_id):
        res = client.patch(
            f"/api/v1/admin/users/{user_id}",
            json={"platform_role": "admin"},
            headers=auth(admin_id),
        )
        assert res.status_code == 403

    def test_promote_to_admin(self, client, auth, owner_id, user_id):
        res = client.patch(
            f"/api/v1/admin/users/{user_id}",
            json={"platform_role": "admin"},
            headers=auth(owner_id),
        )
        assert res.status_code == 200
        assert res.get_json()["user"]["platform_role"] == "admin"

    def test_invalid_role(self, client, auth, owner_id, user_id):
        res = client.patch(
            f"/api/v1/admin/users/{user_id}",
            json={"platform_role": "superuser"},
            headers=auth(owner_id),
        )
        assert res.status_code == 400
        assert res.get_json()["error"] == "Invalid role. Must be user, admin, or owner"

    def test_unknown_user(self, client, auth, owner_id):
        res = client.patch(
            "/api/v1/admin/users/ghost",
            json={"platform_role": "admin"},
            headers=auth(owner_id),
        )
        assert res.status_code == 404

    def test_owner_cannot_be_demoted(self, client, auth, owner_id):
        res = client.patch(
            f"/api/v1/admin/users/{owner_id}",
            json={"platform_role": "admin"},
            headers=auth(owner_id),
        )
        assert res.status_code == 400
        assert "Transfer ownership first" in res.get_json()["error"]


class TestOwnershipTransfer:

    def test_transfer(self, client, auth, owner_id, admin_id):
        res = client.patch(
            f"/api/v1/admin/users/{admin_id}",
            json={"platform_role": "owner"},
            headers=auth(owner_id),
        )

        assert res.status_code == 200
        assert res.get_json()["user"]["platform_role"] == "owner"
        assert _role(client, auth, admin_id, owner_id) == "admin"

    def test_failed_promotion_is_rolled_back(self, client, auth, owner_id, admin_id, monkeypatch):
        original = users_service._set_platform_role

        def flaky(user_id, role):
            if user_id == admin_id:
                raise SQLAlchemyError("promotion failed")
            original(user_id, role)

        monkeypatch.setattr(users_service, "_set_platform_role", flaky)

        res = client.patch(
            f"/api/v1/admin/users/{admin_id}",
            json={"platform_role": "owner"},
            headers=auth(owner_id),
        )

        assert res.status_code == 500
        body = res.get_json()
        assert body["code"] == "INTERNAL_ERROR"
        assert body["outcome"] == "rolled_back"

        monkeypatch.undo()
        assert _role(client, auth, owner_id, owner_id) == "owner"
        assert _role(client, auth, owner_id, admin_id) == "admin"

    def test_failed_compensation_is_critical(self, client, auth, owner_id, admin_id, monkeypatch):
        original = users_service._set_platform_role

        def flaky(user_id, role):
            if role == "owner":
                raise SQLAlchemyError("write failed")
            original(user_id, role)

        monkeypatch.setattr(users_service, "_set_platform_role", flaky)

        res = client.patch(
            f"/api/v1/admin/users/{admin_id}",
            json={"platform_role": "owner"},
            headers=auth(owner_id),
        )

        assert res.status_code == 500
        body = res.get_json()
        assert body["code"] == "CRITICAL"
        assert body["outcome"] == "critical"

        # Nobody holds the owner role any more; the old owner was demoted
        monkeypatch.undo()
        res = client.get("/api/v1/admin/users", query_string={"role": "owner"}, headers=auth(admin_id))
        assert res.get_json()["users"] == []


class TestDeleteUser:

    def test_admin_deletes_regular_user(self, client, auth, admin_id, user_id):
        res = client.delete(f"/api/v1/admin/users/{user_id}", headers=auth(admin_id))
        assert res.status_code == 200

        res = client.get("/api/v1/admin/users", headers=auth(admin_id))
        assert user_id not in [u["id"] for u in res.get_json()["users"]]

    def test_cannot_delete_self(self, client, auth, admin_id):
        res = client.delete(f"/api/v1/admin/users/{admin_id}", headers=auth(admin_id))
        assert res.status_code == 400

    def test_cannot_delete_owner(self, client, auth, admin_id, owner_id):
        res = client.delete(f"/api/v1/admin/users/{owner_id}", headers=auth(admin_id))
        assert res.status_code == 400

    def test_only_owner_deletes_admins(self, client, auth, factory, admin_id, owner_id):
        other_admin = factory.user(role="admin")

        denied = client.delete(f"/api/v1/admin/users/{other_admin}", headers=auth(admin_id))
        assert denied.status_code == 403

        allowed = client.delete(f"/api/v1/admin/users/{other_admin}", headers=auth(owner_id))
        assert allowed.status_code == 200

    def test_deleted_user_token_is_anonymous(self, client, auth, admin_id, user_id):
        client.delete(f"/api/v1/admin/users/{user_id}", headers=auth(admin_id))

        res = client.get("/api/v1/auth/me", headers=auth(user_id))
        assert res.status_code == 401

    def test_foreign_keys_are_enforced(self, app):
        with app.app_context():
            assert db.session.execute(text("PRAGMA foreign_keys")).scalar() == 1

    @pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
    def test_orderings_stay_dense_after_delete(self, app, client, auth, factory, admin_id, user_id):
        author = factory.user()
        asset_id = factory.asset(user_id)

        drop_id = factory.drop(author)
        factory.block(drop_id, 0, content="intro")
        factory.block(drop_id, 1, type="post", asset_id=asset_id, display_mode="auto")
        factory.block(drop_id, 2, content="quote")

        stream_id = factory.stream(author)
        factory.bookmark(stream_id, author, 0, url="https://a.example")
        factory.bookmark(stream_id, user_id, 1, url="https://b.example")
        factory.bookmark(stream_id, author, 2, url="https://c.example")
        factory.bookmark(stream_id, user_id, 3, url="https://d.example")
        factory.member(stream_id, user_id)
        factory.tag(stream_id, factory.asset(author), added_by=user_id)

        own_drop = factory.drop(user_id)
        factory.block(own_drop, 0, content="mine")

        res = client.delete(f"/api/v1/admin/users/{user_id}", headers=auth(admin_id))
        assert res.status_code == 200

        with app.app_context():
            blocks = drop_blocks(drop_id).ordered()
            assert [(b.content, b.position) for b in blocks] == [("intro", 0), ("quote", 1)]

            bookmarks = stream_bookmarks(stream_id).ordered()
            assert [(b.url, b.position) for b in bookmarks] == [
                ("https://a.example", 0), ("https://c.example", 1)
            ]

            assert db.session.get(Drop, own_drop) is None
            assert db.session.get(Asset, asset_id) is None
            assert StreamMember.query.filter_by(user_id=user_id).count() == 0
            assert [link.added_by for link in AssetStream.query.filter_by(stream_id=stream_id)] == [None]

    @pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
    def test_gallery_stays_dense_after_delete(self, app, client, auth, factory, admin_id, user_id):
        author = factory.user()
        drop_id = factory.drop(author)
        gallery = factory.block(drop_id, 0, type="image_gallery", gallery_layout="grid")

        theirs = [factory.asset(author) for _ in range(2)]
        mine = factory.asset(user_id)
        factory.gallery_image(gallery, theirs[0], 0)
        factory.gallery_image(gallery, mine, 1)
        factory.gallery_image(gallery, theirs[1], 2)

        res = client.delete(f"/api/v1/admin/users/{user_id}", headers=auth(admin_id))
        assert res.status_code == 200

        with app.app_context():
            images = gallery_images(gallery).ordered()
            assert [(i.asset_id, i.position) for i in images] == [(theirs[0], 0), (theirs[1], 1)]
