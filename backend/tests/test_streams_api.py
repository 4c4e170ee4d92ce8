"""
Streams: creation, counts, asset tagging with cursor pagination, members and bookmarks.
"""
import pytest


@pytest.fixture
def stream_owner(factory):
    return factory.user()


@pytest.fixture
def stream_id(factory, stream_owner):
    return factory.stream(stream_owner, name="street-photo")


class TestStream:

    def test_counts_are_derived(self, client, auth, factory, user_id, stream_id, stream_owner):
        factory.tag(stream_id, factory.asset(user_id))
        factory.tag(stream_id, factory.asset(user_id))
        factory.member(stream_id, stream_owner, role="owner")

        res = client.get(f"/api/v1/streams/{stream_id}", headers=auth(user_id))

        assert res.status_code == 200
        body = res.get_json()
        assert body["name"] == "street-photo"
        assert body["asset_count"] == 2
        assert body["member_count"] == 1

    def test_missing_stream(self, client, auth, user_id):
        res = client.get("/api/v1/streams/nope", headers=auth(user_id))
        assert res.status_code == 404

    def test_create_normalizes_name_and_owner_joins(self, client, auth, user_id):
        res = client.post(
            "/api/v1/streams",
            json={"name": "  Night Walks! ", "description": "after dark", "is_private": True},
            headers=auth(user_id),
        )

        assert res.status_code == 201
        stream = res.get_json()["stream"]
        assert stream["name"] == "night-walks"
        assert stream["owner_type"] == "user"
        assert stream["owner_id"] == user_id
        assert stream["is_private"] is True
        assert stream["status"] == "active"

        members = client.get(f"/api/v1/streams/{stream['id']}/members", headers=auth(user_id)).get_json()["members"]
        assert [(m["user_id"], m["role"]) for m in members] == [(user_id, "owner")]

    def test_create_returns_existing_stream(self, client, auth, factory, stream_id):
        someone = factory.user()
        res = client.post("/api/v1/streams", json={"name": "Street Photo"}, headers=auth(someone))

        assert res.status_code == 200
        assert res.get_json()["stream"]["id"] == stream_id

    @pytest.mark.parametrize("payload", [
        {},
        {"name": "x"},
        {"name": "!!"},
        {"name": ["street"]},
        {"name": "valid-name", "is_private": "yes"},
    ])
    def test_create_rejects_bad_input(self, client, auth, user_id, payload):
        res = client.post("/api/v1/streams", json=payload, headers=auth(user_id))
        assert res.status_code == 400


class TestAssets:

    def test_tag_is_idempotent(self, client, auth, factory, user_id, stream_id):
        asset_id = factory.asset(user_id)
        url = f"/api/v1/streams/{stream_id}/assets"

        first = client.post(url, json={"asset_id": asset_id}, headers=auth(user_id))
        second = client.post(url, json={"asset_id": asset_id}, headers=auth(user_id))

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.get_json()["asset"]["added_by"] == user_id

        res = client.get(f"/api/v1/streams/{stream_id}", headers=auth(user_id))
        assert res.get_json()["asset_count"] == 1

    def test_tag_unknown_asset(self, client, auth, user_id, stream_id):
        res = client.post(
            f"/api/v1/streams/{stream_id}/assets",
            json={"asset_id": "ghost"},
            headers=auth(user_id),
        )
        assert res.status_code == 404

    def test_cursor_pagination_walks_every_asset_once(self, client, auth, factory, user_id, stream_id):
        asset_ids = [factory.asset(user_id) for _ in range(5)]
        for asset_id in asset_ids:
            factory.tag(stream_id, asset_id)

        seen = []
        cursor = None
        for _ in range(5):
            query = {"limit": 2}
            if cursor:
                query["cursor"] = cursor
            res = client.get(
                f"/api/v1/streams/{stream_id}/assets",
                query_string=query,
                headers=auth(user_id),
            )
            assert res.status_code == 200
            body = res.get_json()
            seen.extend(a["id"] for a in body["assets"])
            cursor = body["pagination"]["next_cursor"]
            if not body["pagination"]["has_more"]:
                break

        assert sorted(seen) == sorted(asset_ids)
        assert len(seen) == len(set(seen))

    def test_bad_cursor(self, client, auth, user_id, stream_id):
        res = client.get(f"/api/v1/streams/{stream_id}/assets?cursor=garbage", headers=auth(user_id))
        assert res.status_code == 400


class TestMembers:

    def test_join(self, client, auth, user_id, stream_id):
        url = f"/api/v1/streams/{stream_id}/members"

        assert client.post(url, headers=auth(user_id)).status_code == 201
        assert client.post(url, headers=auth(user_id)).status_code == 200

        members = client.get(url, headers=auth(user_id)).get_json()["members"]
        assert [(m["user_id"], m["role"]) for m in members] == [(user_id, "member")]

    def test_owner_joins_as_owner(self, client, auth, stream_owner, stream_id):
        res = client.post(f"/api/v1/streams/{stream_id}/members", headers=auth(stream_owner))
        assert res.get_json()["member"]["role"] == "owner"


class TestBookmarks:

    def _add(self, client, headers, stream_id, url, title=None):
        return client.post(
            f"/api/v1/streams/{stream_id}/bookmarks",
            json={"url": url, "title": title},
            headers=headers,
        )

    def _list(self, client, headers, stream_id):
        res = client.get(f"/api/v1/streams/{stream_id}/bookmarks", headers=headers)
        return [(b["url"], b["position"]) for b in res.get_json()["bookmarks"]]

    def test_append_in_order(self, client, auth, user_id, stream_id):
        for n in range(3):
            res = self._add(client, auth(user_id), stream_id, f"https://example.com/{n}")
            assert res.status_code == 201

        assert self._list(client, auth(user_id), stream_id) == [
            ("https://example.com/0", 0),
            ("https://example.com/1", 1),
            ("https://example.com/2", 2),
        ]

    @pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com", None])
    def test_rejects_bad_url(self, client, auth, user_id, stream_id, url):
        res = self._add(client, auth(user_id), stream_id, url)
        assert res.status_code == 400

    def test_creator_may_delete_and_gap_closes(self, client, auth, factory, user_id, stream_id):
        factory.bookmark(stream_id, user_id, 0, url="https://a.example")
        middle = factory.bookmark(stream_id, user_id, 1, url="https://b.example")
        factory.bookmark(stream_id, user_id, 2, url="https://c.example")

        res = client.delete(
            f"/api/v1/streams/{stream_id}/bookmarks/{middle}",
            headers=auth(user_id),
        )

        assert res.status_code == 200
        assert self._list(client, auth(user_id), stream_id) == [
            ("https://a.example", 0), ("https://c.example", 1)
        ]

    def test_stream_owner_may_delete_anyones(self, client, auth, user_id, stream_owner, factory, stream_id):
        bookmark = factory.bookmark(stream_id, user_id, 0)
        res = client.delete(
            f"/api/v1/streams/{stream_id}/bookmarks/{bookmark}",
            headers=auth(stream_owner),
        )
        assert res.status_code == 200

    def test_others_may_not_delete(self, client, auth, factory, user_id, stream_id):
        bookmark = factory.bookmark(stream_id, user_id, 0)
        res = client.delete(
            f"/api/v1/streams/{stream_id}/bookmarks/{bookmark}",
            headers=auth(factory.user()),
        )
        assert res.status_code == 403

    def test_owner_reorders(self, client, auth, factory, user_id, stream_owner, stream_id):
        a = factory.bookmark(stream_id, user_id, 0)
        b = factory.bookmark(stream_id, user_id, 1)

        url = f"/api/v1/streams/{stream_id}/bookmarks"
        denied = client.put(url, json={"bookmark_ids": [b, a]}, headers=auth(user_id))
        assert denied.status_code == 403

        res = client.put(url, json={"bookmark_ids": [b, a]}, headers=auth(stream_owner))
        assert res.status_code == 200
        assert [(x["id"], x["position"]) for x in res.get_json()["bookmarks"]] == [(b, 0), (a, 1)]
