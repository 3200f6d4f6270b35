import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile

from ..errors import StorageError, ValidationFailed
from ..schemas import ApiResponse, UploadOut
from ..security import require_admin
from ..services.media import StorageBackend, get_storage, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("", response_model=UploadOut)
async def upload_file(file: Optional[UploadFile] = File(None), storage: StorageBackend = Depends(get_storage)):
    if not file or not file.filename:
        raise ValidationFailed("No file provided", [{"field": "file", "message": "No file provided"}])
    data = await file.read()
    stored = save_upload(storage, data, file.filename, file.content_type)
    return UploadOut(
        url=stored.url,
        key=stored.key,
        secure_url=stored.url,
        public_id=stored.key,
        name=stored.name,
        size=stored.size,
    )


@router.delete("", response_model=ApiResponse[None])
def delete_file(key: Optional[str] = None, public_id: Optional[str] = Query(None, alias="publicId"),
                storage: StorageBackend = Depends(get_storage)):
    file_key = key or public_id
    if not file_key:
        raise ValidationFailed("File key or public ID is required", [{"field": "key", "message": "required"}])
    result = storage.delete(file_key)
    if not result.success:
        raise StorageError(f"Delete failed for {file_key}")
    logger.info("Deleted file %s", file_key)
    return ApiResponse(message="File deleted successfully")
