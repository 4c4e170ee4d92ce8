# dropstream/api/v1/gallery.py
from flask import g, jsonify, request

from dropstream.application.drops.gallery import (
    add_images,
    list_images,
    remove_image,
    replace_images,
)
from dropstream.normalizers.gallery import normalize_gallery_image
from dropstream.utils.decorators import login_required
from dropstream.utils.request_data import json_body
from . import v1_bp

GALLERY_URL = "/drops/<drop_id>/blocks/<block_id>/gallery"


@v1_bp.route(GALLERY_URL, methods=["GET"])
@login_required
def list_gallery_route(drop_id, block_id):
    images = list_images(drop_id=drop_id, block_id=block_id, user=g.current_user)
    return jsonify({"images": [normalize_gallery_image(i) for i in images]})


@v1_bp.route(GALLERY_URL, methods=["POST"])
@login_required
def add_gallery_images_route(drop_id, block_id):
    images = add_images(
        drop_id=drop_id,
        block_id=block_id,
        user=g.current_user,
        asset_ids=json_body().get("asset_ids"),
    )
    return jsonify({"images": [normalize_gallery_image(i) for i in images]})


@v1_bp.route(GALLERY_URL, methods=["PUT"])
@login_required
def replace_gallery_images_route(drop_id, block_id):
    images = replace_images(
        drop_id=drop_id,
        block_id=block_id,
        user=g.current_user,
        asset_ids=json_body().get("asset_ids"),
    )
    return jsonify({"images": [normalize_gallery_image(i) for i in images]})


@v1_bp.route(GALLERY_URL, methods=["DELETE"])
@login_required
def remove_gallery_image_route(drop_id, block_id):
    remove_image(
        drop_id=drop_id,
        block_id=block_id,
        user=g.current_user,
        asset_id=request.args.get("asset_id"),
    )
    return jsonify({"success": True})
