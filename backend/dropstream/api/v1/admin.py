# dropstream/api/v1/admin.py
from flask import g, jsonify, request

from dropstream.application.admin.streams import (
    delete_stream,
    list_streams,
    merge_streams,
    rename_stream,
)
from dropstream.application.admin.users import change_role, delete_user, list_users
from dropstream.application.streams.streams import get_stream
from dropstream.normalizers.stream import normalize_stream
from dropstream.normalizers.user import normalize_user
from dropstream.utils.decorators import admin_required, owner_required
from dropstream.utils.optimistic_lock import enforce_optimistic_lock
from dropstream.utils.request_data import int_arg, json_body
from . import v1_bp


# ------------------------
# Users
# ------------------------

@v1_bp.route("/admin/users", methods=["GET"])
@admin_required
def admin_list_users():
    return jsonify(list_users(
        search=request.args.get("search", "").strip(),
        role=request.args.get("role") or None,
        page=int_arg("page", 1, maximum=10_000),
        per_page=int_arg("limit", 20),
    ))


@v1_bp.route("/admin/users/<user_id>", methods=["PATCH"])
@owner_required
def admin_change_role(user_id):
    user = change_role(
        actor=g.current_user,
        target_user_id=user_id,
        new_role=json_body().get("platform_role"),
    )
    return jsonify({"user": normalize_user(user, admin=True)})


@v1_bp.route("/admin/users/<user_id>", methods=["DELETE"])
@admin_required
def admin_delete_user(user_id):
    delete_user(actor=g.current_user, target_user_id=user_id)
    return jsonify({"success": True})


# ------------------------
# Streams
# ------------------------

@v1_bp.route("/admin/streams", methods=["GET"])
@admin_required
def admin_list_streams():
    return jsonify(list_streams(
        search=request.args.get("search", "").strip(),
        status=request.args.get("status", "all"),
        page=int_arg("page", 1, maximum=10_000),
        per_page=int_arg("limit", 20),
    ))


@v1_bp.route("/admin/streams/<stream_id>", methods=["PATCH"])
@admin_required
def admin_rename_stream(stream_id):
    enforce_optimistic_lock(
        get_stream(stream_id),
        request.headers.get("If-Unmodified-Since"),
    )

    stream = rename_stream(stream_id=stream_id, name=json_body().get("name"))
    return jsonify({"stream": normalize_stream(stream)})


@v1_bp.route("/admin/streams/<stream_id>", methods=["DELETE"])
@admin_required
def admin_delete_stream(stream_id):
    result = delete_stream(
        stream_id=stream_id,
        delete_assets_too=request.args.get("delete_assets") == "true",
    )
    return jsonify({"success": True, **result})


@v1_bp.route("/admin/streams/merge", methods=["POST"])
@admin_required
def admin_merge_streams():
    data = json_body()
    result = merge_streams(
        source_id=data.get("source_id"),
        target_id=data.get("target_id"),
        actor_id=g.current_user.id,
    )
    return jsonify({"success": True, **result})
