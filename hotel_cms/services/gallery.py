import logging
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ..errors import NotFound, ValidationFailed
from ..models import GalleryImage, HotelCategory
from ..schemas import GalleryItemIn
from .media import StorageBackend, UploadedFile, purge_files, save_upload

logger = logging.getLogger(__name__)


def list_items(db: Session, label: str | None = None) -> list[GalleryImage]:
    q = db.query(GalleryImage).options(selectinload(GalleryImage.hotel_category))
    if label:
        q = q.filter(GalleryImage.category == label)
    return q.order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc()).all()


def get_item(db: Session, item_id: int) -> GalleryImage:
    item = db.get(GalleryImage, item_id)
    if not item:
        raise NotFound("Image not found")
    return item


def _check_owner(db: Session, category_id: Optional[int]) -> None:
    if category_id is not None and not db.get(HotelCategory, category_id):
        raise NotFound("Category not found")


def create_item(
    db: Session,
    storage: StorageBackend,
    meta: GalleryItemIn,
    url: str | None = None,
    key: str | None = None,
    file: UploadedFile | None = None,
) -> GalleryImage:
    """Add a gallery item from either a raw file or an already-uploaded url+key.

    A raw file is uploaded first; if that fails nothing is written.
    """
    if file is None and not (url and key):
        raise ValidationFailed(
            "A file or a URL and public ID are required",
            [{"field": "file", "message": "Provide a file, or both url and publicId"}],
        )
    _check_owner(db, meta.category_id)

    uploaded = False
    if file is not None:
        stored = save_upload(storage, file.data, file.filename, file.content_type, allowed=("image",))
        url, key = stored.url, stored.key
        uploaded = True

    item = GalleryImage(
        category=meta.category,
        url=url,
        public_id=key,
        caption=meta.caption,
        category_id=meta.category_id,
    )
    db.add(item)
    try:
        db.commit()
    except Exception:
        db.rollback()
        if uploaded:
            # Our own upload has nothing pointing at it now
            purge_files(storage, key, reason="gallery create rollback")
        raise
    db.refresh(item)
    logger.info("Created gallery item %s (%s)", item.id, item.category)
    return item


def update_item(
    db: Session,
    storage: StorageBackend,
    item_id: int,
    meta: GalleryItemIn,
    url: str | None = None,
    key: str | None = None,
    file: UploadedFile | None = None,
) -> GalleryImage:
    """Update metadata and optionally swap the file.

    When a replacement is supplied the old file is deleted before the row is
    updated; that delete is best-effort.
    """
    item = get_item(db, item_id)
    if file is None and bool(url) != bool(key):
        raise ValidationFailed(
            "A replacement needs both a URL and a public ID",
            [{"field": "url" if not url else "publicId", "message": "Provide both url and publicId"}],
        )
    _check_owner(db, meta.category_id)

    uploaded = False
    if file is not None:
        stored = save_upload(storage, file.data, file.filename, file.content_type, allowed=("image",))
        url, key = stored.url, stored.key
        uploaded = True

    if url and key:
        if item.public_id and item.public_id != key:
            logger.info("Replacing gallery item %s file %s -> %s", item.id, item.public_id, key)
            purge_files(storage, item.public_id, reason=f"gallery item {item.id} replace")
        item.url = url
        item.public_id = key

    item.category = meta.category
    # Omitted caption/owner leave the stored values alone
    if meta.caption is not None:
        item.caption = meta.caption
    if meta.category_id is not None:
        item.category_id = meta.category_id
    try:
        db.commit()
    except Exception:
        db.rollback()
        if uploaded:
            purge_files(storage, key, reason=f"gallery item {item_id} update rollback")
        raise
    db.refresh(item)
    return item


def delete_item(db: Session, storage: StorageBackend, item_id: int) -> None:
    """Delete the stored file (best-effort), then the row, whatever storage said."""
    item = get_item(db, item_id)
    if item.public_id:
        purge_files(storage, item.public_id, reason=f"gallery item {item.id} delete")
    db.delete(item)
    db.commit()
    logger.info("Deleted gallery item %s", item_id)
