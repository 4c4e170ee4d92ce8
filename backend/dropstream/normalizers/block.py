from .gallery import normalize_gallery_image


def _iso(value):
    return value.isoformat() if value else None


def normalize_block(block, include_gallery=False):
    data = {
        "id": block.id,
        "drop_id": block.drop_id,
        "type": block.type,
        "position": block.position,
        "content": block.content,
        "heading_level": block.heading_level,
        "asset_id": block.asset_id,
        "display_mode": block.display_mode,
        "crop_position_x": block.crop_position_x,
        "crop_position_y": block.crop_position_y,
        "gallery_layout": block.gallery_layout,
        "gallery_featured_index": block.gallery_featured_index,
        "created_at": _iso(block.created_at),
        "updated_at": _iso(block.updated_at),
    }

    if block.asset is not None:
        data["asset"] = {
            "id": block.asset.id,
            "title": block.asset.title,
            "url": block.asset.url,
            "asset_type": block.asset.asset_type,
        }

    if include_gallery and block.type == "image_gallery":
        images = sorted(block.gallery_images, key=lambda i: i.position)
        data["gallery_images"] = [normalize_gallery_image(i) for i in images]

    return data
