def normalize_gallery_image(image):
    data = {
        "id": image.id,
        "block_id": image.block_id,
        "asset_id": image.asset_id,
        "position": image.position,
        "created_at": image.created_at.isoformat() if image.created_at else None,
    }

    if image.asset is not None:
        data["asset"] = {
            "id": image.asset.id,
            "title": image.asset.title,
            "url": image.asset.url,
            "asset_type": image.asset.asset_type,
        }

    return data
