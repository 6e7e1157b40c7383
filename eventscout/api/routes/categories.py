"""
eventscout.api.routes.categories — Category CRUD
=================================================

Reads are public; writes need a signed-in user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from eventscout.api.deps import CurrentUser, get_engine
from eventscout.api.schemas import CategoryCreate, CategoryUpdate, category_dict
from eventscout.database.engine import run_db
from eventscout.errors import NotFound
from eventscout.services import category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(engine=Depends(get_engine)):
    rows = await run_db(category_service.list_categories, engine)
    return [category_dict(c) for c in rows]


@router.get("/{category_id}")
async def get_category(category_id: int, engine=Depends(get_engine)):
    category = await run_db(category_service.get_category, engine, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category_dict(category)


@router.post("", status_code=201)
async def create_category(
    body: CategoryCreate,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    category = await run_db(
        category_service.create_category,
        engine,
        name=body.name,
        description=body.description,
        icon=body.icon,
    )
    return category_dict(category)


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    body: CategoryUpdate,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    category = await run_db(
        category_service.update_category, engine, category_id, body.changes()
    )
    if category is None:
        raise NotFound("Category not found")
    return category_dict(category)


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    if not await run_db(category_service.delete_category, engine, category_id):
        raise NotFound("Category not found")
    return {"message": "Category deleted successfully"}
