from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from ..db import get_db
from ..errors import ValidationFailed
from ..schemas import ApiResponse, GalleryItemIn, GalleryItemOut, parse_payload
from ..security import require_admin
from ..services import gallery
from ..services.media import StorageBackend, UploadedFile, get_storage

router = APIRouter(prefix="/api/admin/gallery", tags=["admin"], dependencies=[Depends(require_admin)])

_KEY_FIELDS = ("publicId", "storageKey", "key")


async def _read_gallery_request(request: Request):
    """Accept either a JSON body (file already uploaded) or multipart form data.

    Returns (metadata, url, key, file).
    """
    content_type = request.headers.get("content-type", "")
    file: Optional[UploadedFile] = None
    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            raise ValidationFailed("Request body is not valid JSON")
        if not isinstance(body, dict):
            raise ValidationFailed("Request body must be a JSON object")
        fields = body
    else:
        form = await request.form()
        fields = {k: v for k, v in form.items() if not isinstance(v, StarletteUploadFile)}
        upload = form.get("file")
        if isinstance(upload, StarletteUploadFile) and upload.filename:
            file = UploadedFile(data=await upload.read(), filename=upload.filename, content_type=upload.content_type)

    meta = parse_payload(GalleryItemIn, {
        "category": fields.get("category"),
        "caption": fields.get("caption"),
        "categoryId": fields.get("categoryId", fields.get("category_id")),
        "url": fields.get("url"),
        "storageKey": next((fields[k] for k in _KEY_FIELDS if fields.get(k) not in (None, "")), None),
    })
    return meta, meta.url, meta.storage_key, file


@router.get("", response_model=ApiResponse[List[GalleryItemOut]])
def list_gallery(db: Session = Depends(get_db)):
    return ApiResponse(data=[GalleryItemOut.model_validate(i) for i in gallery.list_items(db)])


@router.post("", response_model=ApiResponse[GalleryItemOut])
async def create_gallery_item(request: Request, db: Session = Depends(get_db),
                              storage: StorageBackend = Depends(get_storage)):
    meta, url, key, file = await _read_gallery_request(request)
    item = gallery.create_item(db, storage, meta, url=url, key=key, file=file)
    return ApiResponse(data=GalleryItemOut.model_validate(item))


@router.put("/{item_id}", response_model=ApiResponse[GalleryItemOut])
async def update_gallery_item(item_id: int, request: Request, db: Session = Depends(get_db),
                              storage: StorageBackend = Depends(get_storage)):
    meta, url, key, file = await _read_gallery_request(request)
    item = gallery.update_item(db, storage, item_id, meta, url=url, key=key, file=file)
    return ApiResponse(data=GalleryItemOut.model_validate(item))


@router.delete("/{item_id}", response_model=ApiResponse[None])
def delete_gallery_item(item_id: int, db: Session = Depends(get_db),
                        storage: StorageBackend = Depends(get_storage)):
    gallery.delete_item(db, storage, item_id)
    return ApiResponse(message="Image deleted successfully")
