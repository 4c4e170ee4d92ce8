# dropstream/api/v1/streams.py
from flask import g, jsonify, request

from dropstream.application.streams.bookmarks import (
    add_bookmark,
    delete_bookmark,
    list_bookmarks,
    reorder_bookmarks,
)
from dropstream.application.streams.streams import (
    add_asset_to_stream,
    create_stream,
    get_stream_with_counts,
    join_stream,
    list_members,
    list_stream_assets,
)
from dropstream.normalizers.pagination import normalize_pagination
from dropstream.normalizers.stream import (
    normalize_bookmark,
    normalize_member,
    normalize_stream,
    normalize_stream_asset,
)
from dropstream.utils.decorators import login_required
from dropstream.utils.request_data import int_arg, json_body
from . import v1_bp


@v1_bp.route("/streams", methods=["POST"])
@login_required
def create_stream_route():
    stream, created = create_stream(user=g.current_user, data=json_body())
    return jsonify({"stream": normalize_stream(stream)}), 201 if created else 200


@v1_bp.route("/streams/<stream_id>", methods=["GET"])
@login_required
def get_stream_route(stream_id):
    stream, asset_count, member_count = get_stream_with_counts(stream_id)
    return jsonify(normalize_stream(
        stream,
        asset_count=asset_count,
        member_count=member_count,
    ))


# ------------------------
# Assets
# ------------------------

@v1_bp.route("/streams/<stream_id>/assets", methods=["GET"])
@login_required
def list_stream_assets_route(stream_id):
    links, cursor_meta = list_stream_assets(
        stream_id=stream_id,
        cursor=request.args.get("cursor"),
        limit=int_arg("limit", 20),
    )
    return jsonify(normalize_pagination(
        links,
        normalize_stream_asset,
        key="assets",
        cursor=cursor_meta,
    ))


@v1_bp.route("/streams/<stream_id>/assets", methods=["POST"])
@login_required
def add_stream_asset_route(stream_id):
    link, created = add_asset_to_stream(
        stream_id=stream_id,
        user=g.current_user,
        asset_id=json_body().get("asset_id"),
    )
    return jsonify({"asset": normalize_stream_asset(link)}), 201 if created else 200


# ------------------------
# Members
# ------------------------

@v1_bp.route("/streams/<stream_id>/members", methods=["GET"])
@login_required
def list_members_route(stream_id):
    members = list_members(stream_id=stream_id)
    return jsonify({"members": [normalize_member(m) for m in members]})


@v1_bp.route("/streams/<stream_id>/members", methods=["POST"])
@login_required
def join_stream_route(stream_id):
    member, created = join_stream(stream_id=stream_id, user=g.current_user)
    return jsonify({"member": normalize_member(member)}), 201 if created else 200


# ------------------------
# Bookmarks
# ------------------------

@v1_bp.route("/streams/<stream_id>/bookmarks", methods=["GET"])
@login_required
def list_bookmarks_route(stream_id):
    bookmarks = list_bookmarks(stream_id=stream_id)
    return jsonify({"bookmarks": [normalize_bookmark(b) for b in bookmarks]})


@v1_bp.route("/streams/<stream_id>/bookmarks", methods=["POST"])
@login_required
def add_bookmark_route(stream_id):
    data = json_body()
    bookmark = add_bookmark(
        stream_id=stream_id,
        user=g.current_user,
        url=data.get("url"),
        title=data.get("title"),
    )
    return jsonify({"bookmark": normalize_bookmark(bookmark)}), 201


@v1_bp.route("/streams/<stream_id>/bookmarks", methods=["PUT"])
@login_required
def reorder_bookmarks_route(stream_id):
    bookmarks = reorder_bookmarks(
        stream_id=stream_id,
        user=g.current_user,
        bookmark_ids=json_body().get("bookmark_ids"),
    )
    return jsonify({"bookmarks": [normalize_bookmark(b) for b in bookmarks]})


@v1_bp.route("/streams/<stream_id>/bookmarks/<bookmark_id>", methods=["DELETE"])
@login_required
def delete_bookmark_route(stream_id, bookmark_id):
    delete_bookmark(stream_id=stream_id, bookmark_id=bookmark_id, user=g.current_user)
    return jsonify({"success": True})
