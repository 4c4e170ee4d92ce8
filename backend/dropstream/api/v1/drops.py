# dropstream/api/v1/drops.py
from flask import g, jsonify, request

from dropstream.application.drops.access import get_visible_drop
from dropstream.application.drops.blocks import (
    add_block,
    delete_block,
    list_blocks,
    reorder_blocks,
    update_block,
)
from dropstream.application.drops.drops import create_drop, delete_drop, publish_drop, update_drop
from dropstream.normalizers.block import normalize_block
from dropstream.normalizers.drop import normalize_drop
from dropstream.utils.decorators import login_required
from dropstream.utils.request_data import json_body
from . import v1_bp


# ------------------------
# Drops
# ------------------------

@v1_bp.route("/drops", methods=["POST"])
@login_required
def create_drop_route():
    drop = create_drop(user=g.current_user, data=json_body())
    return jsonify(normalize_drop(drop)), 201


@v1_bp.route("/drops/<drop_id>", methods=["GET"])
@login_required
def get_drop_route(drop_id):
    drop = get_visible_drop(drop_id, g.current_user)
    return jsonify(normalize_drop(drop, include_blocks=True))


@v1_bp.route("/drops/<drop_id>", methods=["PATCH"])
@login_required
def update_drop_route(drop_id):
    drop = update_drop(
        drop_id=drop_id,
        user=g.current_user,
        data=json_body(),
        if_unmodified_since=request.headers.get("If-Unmodified-Since"),
    )
    return jsonify(normalize_drop(drop))


@v1_bp.route("/drops/<drop_id>", methods=["DELETE"])
@login_required
def delete_drop_route(drop_id):
    delete_drop(drop_id=drop_id, user=g.current_user)
    return jsonify({"success": True})


@v1_bp.route("/drops/<drop_id>/publish", methods=["POST"])
@login_required
def publish_drop_route(drop_id):
    drop = publish_drop(drop_id=drop_id, user=g.current_user)
    return jsonify(normalize_drop(drop))


# ------------------------
# Blocks
# ------------------------

@v1_bp.route("/drops/<drop_id>/blocks", methods=["GET"])
@login_required
def list_blocks_route(drop_id):
    blocks = list_blocks(drop_id=drop_id, user=g.current_user)
    return jsonify({
        "blocks": [normalize_block(b, include_gallery=True) for b in blocks]
    })


@v1_bp.route("/drops/<drop_id>/blocks", methods=["POST"])
@login_required
def add_block_route(drop_id):
    block = add_block(drop_id=drop_id, user=g.current_user, data=json_body())
    return jsonify({"block": normalize_block(block)}), 201


@v1_bp.route("/drops/<drop_id>/blocks", methods=["PUT"])
@login_required
def reorder_blocks_route(drop_id):
    data = json_body()
    blocks = reorder_blocks(
        drop_id=drop_id,
        user=g.current_user,
        block_ids=data.get("block_ids"),
    )
    return jsonify({"blocks": [normalize_block(b) for b in blocks]})


@v1_bp.route("/drops/<drop_id>/blocks/<block_id>", methods=["PATCH"])
@login_required
def update_block_route(drop_id, block_id):
    block = update_block(
        drop_id=drop_id,
        block_id=block_id,
        user=g.current_user,
        data=json_body(),
        if_unmodified_since=request.headers.get("If-Unmodified-Since"),
    )
    return jsonify({"block": normalize_block(block)})


@v1_bp.route("/drops/<drop_id>/blocks/<block_id>", methods=["DELETE"])
@login_required
def delete_block_route(drop_id, block_id):
    delete_block(drop_id=drop_id, block_id=block_id, user=g.current_user)
    return jsonify({"success": True})
