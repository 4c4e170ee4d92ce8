"""
Drop block variants.

A block is one of a closed set of kinds; each kind carries only the
payload columns that make sense for it. Request bodies are parsed into a
variant here, before anything touches the session.
"""
from dataclasses import MISSING, dataclass, fields
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Type

from dropstream.errors import ValidationError

HEADING_LEVELS = (1, 2, 3)
DISPLAY_MODES = ("auto", "fit", "cover")
GALLERY_LAYOUTS = ("grid", "featured")

# Keys the create endpoint accepts besides the variant payload
_CREATE_META_KEYS = {"type", "position"}

# asset_id is fixed at creation; everything else can be patched
_IMMUTABLE_FIELDS = {"asset_id"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_content(value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise ValidationError("content must be a string")


def _check_heading_level(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value not in HEADING_LEVELS:
        raise ValidationError("heading_level must be 1, 2 or 3")


def _check_asset_id(value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError("asset_id must be a non-empty string")


def _check_display_mode(value: Any) -> None:
    if value not in DISPLAY_MODES:
        raise ValidationError(f"display_mode must be one of {', '.join(DISPLAY_MODES)}")


def _check_crop(value: Any) -> None:
    if not _is_number(value) or not 0 <= value <= 100:
        raise ValidationError("crop positions must be numbers between 0 and 100")


def _check_gallery_layout(value: Any) -> None:
    if value not in GALLERY_LAYOUTS:
        raise ValidationError(f"gallery_layout must be one of {', '.join(GALLERY_LAYOUTS)}")


def _check_featured_index(value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValidationError("gallery_featured_index must be a non-negative integer")


_FIELD_CHECKS: Dict[str, Callable[[Any], None]] = {
    "content": _check_content,
    "heading_level": _check_heading_level,
    "asset_id": _check_asset_id,
    "display_mode": _check_display_mode,
    "crop_position_x": _check_crop,
    "crop_position_y": _check_crop,
    "gallery_layout": _check_gallery_layout,
    "gallery_featured_index": _check_featured_index,
}


@dataclass(frozen=True)
class BlockPayload:
    type: ClassVar[str]

    def __post_init__(self):
        for f in fields(self):
            _FIELD_CHECKS[f.name](getattr(self, f.name))

    def columns(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class TextBlock(BlockPayload):
    type: ClassVar[str] = "text"
    content: Optional[str] = None


@dataclass(frozen=True)
class HeadingBlock(BlockPayload):
    type: ClassVar[str] = "heading"
    content: Optional[str] = None
    heading_level: int = 2


@dataclass(frozen=True)
class QuoteBlock(BlockPayload):
    type: ClassVar[str] = "quote"
    content: Optional[str] = None


@dataclass(frozen=True)
class DividerBlock(BlockPayload):
    type: ClassVar[str] = "divider"


@dataclass(frozen=True)
class PostBlock(BlockPayload):
    type: ClassVar[str] = "post"
    asset_id: str
    display_mode: str = "auto"
    crop_position_x: float = 50
    crop_position_y: float = 0


@dataclass(frozen=True)
class FeaturedPostBlock(PostBlock):
    type: ClassVar[str] = "featured_post"


@dataclass(frozen=True)
class ImageGalleryBlock(BlockPayload):
    type: ClassVar[str] = "image_gallery"
    gallery_layout: str = "grid"
    gallery_featured_index: int = 0


BLOCK_VARIANTS: Dict[str, Type[BlockPayload]] = {
    cls.type: cls
    for cls in (
        TextBlock,
        HeadingBlock,
        QuoteBlock,
        DividerBlock,
        PostBlock,
        FeaturedPostBlock,
        ImageGalleryBlock,
    )
}

BLOCK_TYPES = tuple(BLOCK_VARIANTS)

# Columns a block row may carry; a variant leaves the rest NULL
PAYLOAD_COLUMNS = tuple(_FIELD_CHECKS)


def _variant_for(block_type: Any) -> Type[BlockPayload]:
    variant = BLOCK_VARIANTS.get(block_type) if isinstance(block_type, str) else None
    if variant is None:
        raise ValidationError(
            "Invalid block type",
            payload={"allowed_types": list(BLOCK_TYPES)}
        )
    return variant


def parse_block(data: Mapping[str, Any]) -> BlockPayload:
    """
    Build the variant named by data["type"].

    Raises ValidationError for unknown types, missing required payload,
    fields foreign to the variant, and out-of-range values.
    """
    variant = _variant_for(data.get("type"))
    allowed = {f.name for f in fields(variant)}

    extra = set(data) - allowed - _CREATE_META_KEYS
    if extra:
        raise ValidationError(
            f"Fields not allowed for {variant.type} blocks: {', '.join(sorted(extra))}"
        )

    for f in fields(variant):
        required = f.default is MISSING and f.default_factory is MISSING
        if required and data.get(f.name) is None:
            raise ValidationError(f"{f.name} is required for {variant.type} blocks")

    return variant(**{name: data[name] for name in allowed if name in data})


def parse_block_update(block_type: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a partial update against the stored block's variant.

    Returns only the columns that should be written.
    """
    variant = _variant_for(block_type)
    updatable = {f.name for f in fields(variant)} - _IMMUTABLE_FIELDS

    rejected = set(data) - updatable
    if rejected:
        raise ValidationError(
            f"Fields not updatable on {block_type} blocks: {', '.join(sorted(rejected))}"
        )

    if not data:
        raise ValidationError("No valid fields provided for update")

    for name, value in data.items():
        _FIELD_CHECKS[name](value)

    return dict(data)
