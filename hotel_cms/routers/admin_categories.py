from typing import Any, List
from fastapi import APIRouter, BackgroundTasks, Body, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import ApiResponse, CategoryOut, PriceOut, PriceSetIn
from ..security import require_admin
from ..services import categories
from ..services.media import StorageBackend, get_storage

router = APIRouter(prefix="/api/admin/categories", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/{category_id}", response_model=ApiResponse[CategoryOut])
def get_category(category_id: int, db: Session = Depends(get_db)):
    return ApiResponse(data=CategoryOut.model_validate(categories.get_category(db, category_id)))


@router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
def patch_category(category_id: int, body: Any = Body(...), db: Session = Depends(get_db)):
    """Update any subset of category fields and/or replace the price set."""
    category = categories.patch_category(db, category_id, body)
    return ApiResponse(data=CategoryOut.model_validate(category))


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(category_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db),
                    storage: StorageBackend = Depends(get_storage)):
    categories.delete_category(db, storage, category_id, defer=background_tasks.add_task)
    return ApiResponse(message="Category deleted successfully")


@router.put("/{category_id}/prices", response_model=ApiResponse[List[PriceOut]])
def replace_prices(category_id: int, payload: PriceSetIn, db: Session = Depends(get_db)):
    prices = categories.replace_prices(db, category_id, payload.prices)
    return ApiResponse(data=[PriceOut.model_validate(p) for p in prices])


@router.delete("/{category_id}/prices", response_model=ApiResponse[None])
def delete_prices(category_id: int, db: Session = Depends(get_db)):
    count = categories.delete_prices(db, category_id)
    return ApiResponse(message=f"Deleted {count} price tier(s)")
