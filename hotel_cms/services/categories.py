"""Room category lifecycle.

A category owns its image rows, its price tiers and a single video URL. The
files behind images and video live in external storage and are not owned by
the database, so every mutation that drops a reference also tries to delete
the file. Storage cleanup is best-effort: a failed delete is logged and the
database change goes ahead regardless.
"""
import logging
import re
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..errors import NotFound, ValidationFailed
from ..models import GalleryImage, HotelCategory, Price
from ..schemas import CategoryIn, CategoryPatch, MediaDescriptor, PriceSetIn, PriceTierIn, parse_payload
from .file_keys import extract_file_key
from .media import StorageBackend, purge_files

logger = logging.getLogger(__name__)

ROOM_IMAGE_LABEL = "Rooms"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """URL-safe slug: lowercase alphanumerics separated by single dashes."""
    return _NON_ALNUM.sub("-", (title or "").lower()).strip("-")


def _build_images(title: str, descriptors: list[MediaDescriptor]) -> list[GalleryImage]:
    return [
        GalleryImage(
            category=ROOM_IMAGE_LABEL,
            url=d.url,
            public_id=d.storage_key,
            caption=f"{title} - Image {n}",
        )
        for n, d in enumerate(descriptors, start=1)
    ]


def _ensure_slug_available(db: Session, slug: str, exclude_id: int | None = None) -> None:
    if not slug:
        raise ValidationFailed(
            "Title must contain at least one letter or digit",
            [{"field": "title", "message": "Title must contain at least one letter or digit"}],
        )
    q = db.query(HotelCategory.id).filter(HotelCategory.slug == slug)
    if exclude_id is not None:
        q = q.filter(HotelCategory.id != exclude_id)
    if q.first():
        raise ValidationFailed(
            "A room with this title already exists",
            [{"field": "title", "message": f"Slug '{slug}' is already in use"}],
        )


def _video_key(url: Optional[str], category_id: int) -> Optional[str]:
    if not url or not url.strip():
        return None
    key = extract_file_key(url)
    if not key:
        logger.warning("Skipping video cleanup for category %s: no file key in %s", category_id, url)
    return key


# ==== Reads ====

def list_categories(db: Session, slug: str | None = None) -> list[HotelCategory]:
    q = db.query(HotelCategory).options(
        selectinload(HotelCategory.images), selectinload(HotelCategory.prices)
    )
    if slug:
        q = q.filter(HotelCategory.slug == slug)
    return q.order_by(HotelCategory.created_at.desc(), HotelCategory.id.desc()).all()


def get_category(db: Session, category_id: int) -> HotelCategory:
    category = (
        db.query(HotelCategory)
        .options(selectinload(HotelCategory.images), selectinload(HotelCategory.prices))
        .filter(HotelCategory.id == category_id)
        .first()
    )
    if not category:
        raise NotFound("Category not found")
    return category


def get_category_by_slug(db: Session, slug: str) -> HotelCategory:
    found = list_categories(db, slug=slug)
    if not found:
        raise NotFound("Category not found")
    return found[0]


def list_prices(db: Session, category_id: int | None = None) -> list[Price]:
    q = db.query(Price)
    if category_id is not None:
        q = q.filter(Price.category_id == category_id)
    return q.order_by(Price.hourly_hours.asc(), Price.id.asc()).all()


# ==== Create / update / delete ====

def create_category(db: Session, payload: CategoryIn) -> HotelCategory:
    """Persist a category and one image row per already-uploaded image."""
    slug = slugify(payload.title)
    _ensure_slug_available(db, slug)

    video = payload.video_descriptor()
    category = HotelCategory(
        slug=slug,
        title=payload.title,
        description=payload.description,
        specs=payload.specs,
        essential_amenities=payload.essential_amenities,
        bed_type=payload.bed_type,
        max_occupancy=payload.max_occupancy,
        room_size=payload.room_size,
        room_count=payload.room_count,
        video_url=video.url if video else None,
        images=_build_images(payload.title, payload.images),
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created category %s (%s) with %d image(s)", category.id, slug, len(category.images))
    return category


def update_category(db: Session, storage: StorageBackend, category_id: int, payload: CategoryIn) -> HotelCategory:
    """Replace a category's fields, images and video.

    Files no longer referenced (images whose key is missing from the new
    list, and the old video if it changed) are deleted from storage before
    the database write. Those deletes never block the update.
    """
    category = get_category(db, category_id)
    slug = slugify(payload.title)
    _ensure_slug_available(db, slug, exclude_id=category.id)

    new_keys = {d.storage_key for d in payload.images}
    stale_keys = [img.public_id for img in category.images if img.public_id and img.public_id not in new_keys]

    video = payload.video_descriptor()
    new_video_url = video.url if video else None
    if category.video_url and category.video_url.strip() and category.video_url != new_video_url:
        old_video_key = _video_key(category.video_url, category.id)
        if old_video_key:
            stale_keys.append(old_video_key)
    elif category.video_url:
        logger.debug("Video unchanged for category %s", category.id)

    logger.info(
        "Updating category %s: %d -> %d image(s), %d file(s) to delete",
        category.id, len(category.images), len(payload.images), len(stale_keys),
    )
    purge_files(storage, stale_keys, reason=f"category {category.id} update")

    category.images = _build_images(payload.title, payload.images)
    category.slug = slug
    category.title = payload.title
    category.description = payload.description
    category.specs = payload.specs
    category.essential_amenities = payload.essential_amenities
    category.bed_type = payload.bed_type
    category.max_occupancy = payload.max_occupancy
    category.room_size = payload.room_size
    category.room_count = payload.room_count
    category.video_url = new_video_url
    db.commit()
    db.refresh(category)
    return category


def delete_category(
    db: Session,
    storage: StorageBackend,
    category_id: int,
    defer: Callable[..., Any] | None = None,
) -> list[str]:
    """Delete a category (images and prices cascade), then clean up its files.

    The database delete is committed first and is final. File cleanup runs
    afterwards, through ``defer`` (e.g. ``BackgroundTasks.add_task``) when
    given, and its failure is only logged. Returns the keys scheduled for
    deletion.
    """
    category = get_category(db, category_id)
    keys = [img.public_id for img in category.images if img.public_id]
    video_key = _video_key(category.video_url, category.id)
    if video_key:
        keys.append(video_key)

    title = category.title
    db.delete(category)
    db.commit()
    logger.info("Deleted category %s (%s); %d file(s) to clean up", category_id, title, len(keys))

    if keys:
        reason = f"category {category_id} delete"
        if defer is not None:
            defer(purge_files, storage, keys, reason)
        else:
            purge_files(storage, keys, reason)
    return keys


# ==== Partial update and price tiers ====

def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (dict, list)) and len(value) == 0:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def strip_blank_fields(data: dict) -> dict:
    """Drop null, empty-collection and blank-string values.

    An omitted field and a present-but-empty field both mean "leave as is".
    """
    return {k: v for k, v in data.items() if not _is_blank(v)}


def _replace_prices(db: Session, category: HotelCategory, tiers: list[PriceTierIn]) -> None:
    limit = settings.MAX_PRICE_TIERS
    if len(tiers) > limit:
        logger.info("Category %s: keeping first %d of %d price tiers", category.id, limit, len(tiers))
    db.query(Price).filter(Price.category_id == category.id).delete(synchronize_session=False)
    for tier in tiers[:limit]:
        db.add(Price(
            category_id=category.id,
            hourly_hours=tier.hourly_hours,
            rate_cents=tier.rate_cents,
            label=tier.label,
        ))
    db.flush()
    db.expire(category, ["prices"])


def patch_category(db: Session, category_id: int, body: Any) -> HotelCategory:
    """Update any subset of category fields and, optionally, the price set.

    Both changes commit in one transaction. A body holding only ``prices``
    skips category-field validation entirely.
    """
    if not isinstance(body, dict):
        raise ValidationFailed("Request body must be a JSON object")
    data = dict(body)
    raw_prices = data.pop("prices", None)

    cleaned = strip_blank_fields(data)
    patch = parse_payload(CategoryPatch, cleaned) if cleaned else None
    tiers = None
    if raw_prices is not None:
        tiers = parse_payload(PriceSetIn, {"prices": raw_prices}).prices

    category = get_category(db, category_id)
    try:
        if patch is not None:
            fields = patch.model_dump(exclude_none=True)
            if "title" in fields and "slug" not in fields:
                fields["slug"] = slugify(fields["title"])
            if "slug" in fields and fields["slug"] != category.slug:
                _ensure_slug_available(db, fields["slug"], exclude_id=category.id)
            for name, value in fields.items():
                setattr(category, name, value)
        if tiers is not None:
            _replace_prices(db, category, tiers)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_category(db, category_id)


def replace_prices(db: Session, category_id: int, tiers: list[PriceTierIn]) -> list[Price]:
    """Delete every tier for the category and recreate up to MAX_PRICE_TIERS of them."""
    category = get_category(db, category_id)
    try:
        _replace_prices(db, category, tiers)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return list_prices(db, category_id)


def delete_prices(db: Session, category_id: int) -> int:
    get_category(db, category_id)
    count = db.query(Price).filter(Price.category_id == category_id).delete(synchronize_session=False)
    db.commit()
    logger.info("Deleted %d price tier(s) for category %s", count, category_id)
    return count
