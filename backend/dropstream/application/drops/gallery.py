# dropstream/application/drops/gallery.py
from typing import Any, List, Sequence, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from dropstream.errors import CriticalError, InternalError, NotFound, ValidationError
from dropstream.extensions import db
from dropstream.models.asset import Asset
from dropstream.models.drop_block import DropBlock
from dropstream.models.gallery_image import GalleryImage
from dropstream.utils.compensation import Outcome, run_compensated
from dropstream.utils.positions import PositionedCollection
from dropstream.utils.transaction import transactional
from .access import get_drop_block, get_owned_drop, get_visible_drop


def gallery_images(block_id: str) -> PositionedCollection:
    return PositionedCollection(GalleryImage, "block_id", block_id, label="gallery image")


def _get_gallery_block(drop, block_id: str) -> DropBlock:
    block = get_drop_block(drop, block_id)
    if block.type != "image_gallery":
        raise ValidationError("Block is not an image gallery")
    return block


def _validate_asset_ids(asset_ids: Any, *, allow_empty: bool) -> List[str]:
    if not isinstance(asset_ids, list) or not all(isinstance(a, str) and a for a in asset_ids):
        raise ValidationError("asset_ids array is required")
    if not asset_ids and not allow_empty:
        raise ValidationError("asset_ids array is required")
    return asset_ids


def _assert_assets_exist(asset_ids: Sequence[str]) -> None:
    if not asset_ids:
        return
    found = {row[0] for row in db.session.query(Asset.id).filter(Asset.id.in_(set(asset_ids))).all()}
    missing = sorted(set(asset_ids) - found)
    if missing:
        raise NotFound("Asset not found", payload={"missing_asset_ids": missing})


def _insert_images(block_id: str, asset_ids: Sequence[str]) -> None:
    for position, asset_id in enumerate(asset_ids):
        db.session.add(GalleryImage(block_id=block_id, asset_id=asset_id, position=position))
    db.session.flush()


def _restore_images(block_id: str, retained: Sequence[Tuple[str, int]]) -> None:
    for asset_id, position in retained:
        db.session.add(GalleryImage(block_id=block_id, asset_id=asset_id, position=position))
    db.session.flush()


def list_images(*, drop_id: str, block_id: str, user) -> List[GalleryImage]:
    drop = get_visible_drop(drop_id, user)
    block = get_drop_block(drop, block_id)
    return gallery_images(block.id).ordered()


def add_images(*, drop_id: str, block_id: str, user, asset_ids: Any) -> List[GalleryImage]:
    """
    Append assets to a gallery.

    Assets already in the gallery keep their position, so repeating a
    request changes nothing. Returns the rows for the requested assets.
    """
    asset_ids = _validate_asset_ids(asset_ids, allow_empty=False)
    drop = get_owned_drop(drop_id, user)
    block = _get_gallery_block(drop, block_id)
    _assert_assets_exist(asset_ids)

    collection = gallery_images(block.id)
    present = {image.asset_id for image in collection.query().all()}
    new_ids = [a for a in dict.fromkeys(asset_ids) if a not in present]

    with transactional():
        collection.append_many([GalleryImage(asset_id=a) for a in new_ids])

    collection.check()
    return (
        collection.query()
        .filter(GalleryImage.asset_id.in_(set(asset_ids)))
        .order_by(GalleryImage.position.asc())
        .all()
    )


def replace_images(*, drop_id: str, block_id: str, user, asset_ids: Any) -> List[GalleryImage]:
    """
    Replace the whole gallery with `asset_ids`, in that order.

    Steps are committed one at a time:
    1. read and keep the current ordered set
    2. delete every image of the block
    3. insert the new set; if that fails, re-insert the kept set

    Failure outcomes:
    - InternalError, outcome "rolled_back": new set rejected, old set back
    - CriticalError, outcome "critical": old set could not be restored
    """
    asset_ids = _validate_asset_ids(asset_ids, allow_empty=True)
    if len(set(asset_ids)) != len(asset_ids):
        raise ValidationError("asset_ids contains duplicates")

    drop = get_owned_drop(drop_id, user)
    block = _get_gallery_block(drop, block_id)
    _assert_assets_exist(asset_ids)

    block_id = block.id
    collection = gallery_images(block_id)
    retained = [(image.asset_id, image.position) for image in collection.ordered()]

    try:
        with transactional("gallery.replace clear"):
            collection.query().delete(synchronize_session="fetch")
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[gallery.replace] clearing block {block_id} failed: {exc}")
        raise InternalError("Failed to clear existing gallery images")

    if not asset_ids:
        return []

    outcome = run_compensated(
        lambda: _insert_images(block_id, asset_ids),
        lambda: _restore_images(block_id, retained),
        label="gallery.replace",
    )

    if outcome is Outcome.CRITICAL:
        raise CriticalError(
            "Failed to update gallery and could not restore original images",
            payload={"outcome": outcome.value, "restored": False}
        )

    if outcome is Outcome.ROLLED_BACK:
        raise InternalError(
            "Failed to update gallery",
            payload={"outcome": outcome.value, "restored": True}
        )

    collection.check()
    return collection.ordered()


def remove_image(*, drop_id: str, block_id: str, user, asset_id: Any) -> None:
    if not isinstance(asset_id, str) or not asset_id:
        raise ValidationError("asset_id query parameter is required")

    drop = get_owned_drop(drop_id, user)
    block = _get_gallery_block(drop, block_id)

    collection = gallery_images(block.id)
    image = collection.query().filter(GalleryImage.asset_id == asset_id).first()

    with transactional():
        collection.remove(image)

    collection.check()
