"""
Meta Pixel settings helpers for link pages.

Settings management only: saving the pixel ID is handled by whatever owns the
link page metadata, and rendering the pixel snippet happens on the live page.
Helpers here take that metadata as a mapping of link_page_id -> {meta_key: value}.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

META_PIXEL_ID_KEY = "_link_page_meta_pixel_id"

PageMeta = Mapping[int, Mapping[str, Any]]


def _is_empty(pixel_id) -> bool:
    # "0" is how an unset field often comes back from page metadata
    return pixel_id is None or str(pixel_id) in ("", "0")


@dataclass(frozen=True)
class MetaPixelSettings:
    pixel_id: str
    is_enabled: bool
    is_valid: bool


def validate_meta_pixel_id(pixel_id: Optional[str]) -> bool:
    """
    Return True if `pixel_id` looks like a Meta Pixel ID.

    An empty value (None, "" or "0") is valid and means tracking is
    disabled. Otherwise the ID must be 15 or 16 ASCII digits.
    """
    if _is_empty(pixel_id):
        return True
    pixel_id = str(pixel_id)
    return pixel_id.isascii() and pixel_id.isdigit() and 15 <= len(pixel_id) <= 16


def get_meta_pixel_id(meta: PageMeta, link_page_id: Optional[int]) -> str:
    """Stored pixel ID for a link page as a string, or "" when unset."""
    if not link_page_id:
        return ""
    value = meta.get(link_page_id, {}).get(META_PIXEL_ID_KEY)
    return "" if value is None else str(value)


def is_meta_pixel_enabled(meta: PageMeta, link_page_id: Optional[int]) -> bool:
    pixel_id = get_meta_pixel_id(meta, link_page_id)
    return not _is_empty(pixel_id) and validate_meta_pixel_id(pixel_id)


def get_meta_pixel_settings(meta: PageMeta, link_page_id: Optional[int]) -> MetaPixelSettings:
    pixel_id = get_meta_pixel_id(meta, link_page_id)
    return MetaPixelSettings(
        pixel_id=pixel_id,
        is_enabled=not _is_empty(pixel_id) and validate_meta_pixel_id(pixel_id),
        is_valid=validate_meta_pixel_id(pixel_id),
    )
