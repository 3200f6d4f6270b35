from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import ApiResponse, CategoryOut, GalleryItemOut, PriceOut
from ..services import categories, gallery

router = APIRouter(prefix="/api", tags=["public-api"])


def _no_store(response: Response):
    # Pages re-fetch after every admin edit; never serve a cached list
    response.headers["Cache-Control"] = "no-store"


@router.get("/categories", response_model=ApiResponse[List[CategoryOut]], dependencies=[Depends(_no_store)])
def list_categories(slug: Optional[str] = None, db: Session = Depends(get_db)):
    return ApiResponse(data=[CategoryOut.model_validate(c) for c in categories.list_categories(db, slug=slug)])


@router.get("/categories/{slug}", response_model=ApiResponse[CategoryOut], dependencies=[Depends(_no_store)])
def get_category(slug: str, db: Session = Depends(get_db)):
    return ApiResponse(data=CategoryOut.model_validate(categories.get_category_by_slug(db, slug)))


@router.get("/prices", response_model=ApiResponse[List[PriceOut]], dependencies=[Depends(_no_store)])
def list_prices(category_id: Optional[int] = Query(None, alias="categoryId"), db: Session = Depends(get_db)):
    return ApiResponse(data=[PriceOut.model_validate(p) for p in categories.list_prices(db, category_id)])


@router.get("/gallery", response_model=ApiResponse[List[GalleryItemOut]], dependencies=[Depends(_no_store)])
def list_gallery(category: Optional[str] = None, db: Session = Depends(get_db)):
    return ApiResponse(data=[GalleryItemOut.model_validate(i) for i in gallery.list_items(db, label=category)])
