# dropstream/application/assets.py
from typing import Sequence

from dropstream.extensions import db
from dropstream.models.asset import Asset
from dropstream.models.drop_block import DropBlock
from dropstream.models.gallery_image import GalleryImage
from .drops.blocks import drop_blocks
from .drops.gallery import gallery_images


def delete_assets(asset_ids: Sequence[str]) -> int:
    """
    Delete assets together with every block and gallery image showing them.

    Runs inside the caller's transaction. Gallery images and blocks go
    first, then the assets; every touched drop and gallery is re-compacted
    so no gap is left in its ordering.
    """
    asset_ids = list(set(asset_ids))
    if not asset_ids:
        return 0

    blocks = DropBlock.query.filter(DropBlock.asset_id.in_(asset_ids)).all()
    images = GalleryImage.query.filter(GalleryImage.asset_id.in_(asset_ids)).all()

    touched_drops = {block.drop_id for block in blocks}
    deleted_block_ids = {block.id for block in blocks}
    touched_galleries = {image.block_id for image in images} - deleted_block_ids

    for image in images:
        db.session.delete(image)
    for block in blocks:
        db.session.delete(block)
    db.session.flush()

    for drop_id in touched_drops:
        drop_blocks(drop_id).compact()
    for block_id in touched_galleries:
        gallery_images(block_id).compact()

    assets = Asset.query.filter(Asset.id.in_(asset_ids)).all()
    for asset in assets:
        db.session.delete(asset)
    db.session.flush()

    return len(assets)
