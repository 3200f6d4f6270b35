from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import ApiResponse, CategoryIn, CategoryOut
from ..security import require_admin
from ..services import categories
from ..services.media import StorageBackend, get_storage

router = APIRouter(prefix="/api/admin/rooms", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("", response_model=ApiResponse[List[CategoryOut]])
def list_rooms(db: Session = Depends(get_db)):
    return ApiResponse(data=[CategoryOut.model_validate(c) for c in categories.list_categories(db)])


@router.post("", response_model=ApiResponse[CategoryOut], status_code=201)
def create_room(payload: CategoryIn, db: Session = Depends(get_db)):
    room = categories.create_category(db, payload)
    return ApiResponse(data=CategoryOut.model_validate(room))


@router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
def update_room(category_id: int, payload: CategoryIn, db: Session = Depends(get_db),
                storage: StorageBackend = Depends(get_storage)):
    room = categories.update_category(db, storage, category_id, payload)
    return ApiResponse(data=CategoryOut.model_validate(room))


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_room(category_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db),
                storage: StorageBackend = Depends(get_storage)):
    categories.delete_category(db, storage, category_id, defer=background_tasks.add_task)
    return ApiResponse(message="Room deleted successfully")
