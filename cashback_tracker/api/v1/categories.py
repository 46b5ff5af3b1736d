"""GET/POST/DELETE /api/categories - Purchase categories"""

from fastapi import APIRouter, Depends, HTTPException

from cashback_tracker.api.dependencies import get_category_repo, get_transaction_repo
from cashback_tracker.api.v1.schemas import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    DeleteCategoryResponse,
)
from cashback_tracker.domain.exceptions import (
    CategoryExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    ProtectedCategoryError,
)
from cashback_tracker.infrastructure.storage.repositories import CategoryRepository, TransactionRepository

router = APIRouter()


@router.get("/categories", response_model=CategoryListResponse)
def list_categories(repo: CategoryRepository = Depends(get_category_repo)):
    return CategoryListResponse(categories=repo.list_all())


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def add_category(
    request_body: CategoryCreate,
    repo: CategoryRepository = Depends(get_category_repo),
):
    try:
        name = repo.add(request_body.name)
    except CategoryExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CategoryResponse(name=name)


@router.delete("/categories/{name}", response_model=DeleteCategoryResponse)
def delete_category(
    name: str,
    repo: CategoryRepository = Depends(get_category_repo),
    transactions: TransactionRepository = Depends(get_transaction_repo),
):
    """Remove a category; blocked while any purchase still uses it"""
    try:
        deleted = repo.delete(name, transactions.list_all())
    except ProtectedCategoryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CategoryInUseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return DeleteCategoryResponse(deleted=deleted)
