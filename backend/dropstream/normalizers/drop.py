from .block import normalize_block


def normalize_drop(drop, include_blocks=False):
    data = {
        "id": drop.id,
        "title": drop.title,
        "description": drop.description,
        "status": drop.status,
        "created_by": drop.created_by,
        "use_blocks": drop.use_blocks,
        "published_at": drop.published_at.isoformat() if drop.published_at else None,
        "created_at": drop.created_at.isoformat() if drop.created_at else None,
    }

    if include_blocks:
        blocks = sorted(drop.blocks, key=lambda b: b.position)
        data["blocks"] = [normalize_block(b) for b in blocks]

    return data
