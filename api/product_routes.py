"""
Product catalog routes (create / read / update / delete / search).
The scoring engine never reads the catalog directly; handlers resolve rows
through the injected repository.
"""

import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_repository
from api.schemas import ProductCreateRequest, ProductUpdateRequest
from db.repository import ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("")
def list_products(repository: ProductRepository = Depends(get_repository)):
    products = repository.list()
    return {"success": True, "data": products, "count": len(products)}


@router.post("", status_code=201)
def create_product(
    request: ProductCreateRequest,
    repository: ProductRepository = Depends(get_repository),
):
    return {"success": True, "data": repository.create(request.model_dump())}


@router.get("/search/{query}")
def search_products(query: str, repository: ProductRepository = Depends(get_repository)):
    results = repository.search(query)
    return {"success": True, "data": results, "count": len(results)}


@router.get("/{product_id}")
def get_product(product_id: str, repository: ProductRepository = Depends(get_repository)):
    return {"success": True, "data": repository.get(product_id)}


@router.put("/{product_id}")
def update_product(
    product_id: str,
    request: ProductUpdateRequest,
    repository: ProductRepository = Depends(get_repository),
):
    """Partial update: only fields present in the body are applied."""
    patch = request.model_dump(exclude_unset=True)
    product = repository.update(product_id, patch)
    logger.info(f"Updated product {product_id}: {sorted(patch)}")
    return {"success": True, "data": product}


@router.delete("/{product_id}")
def delete_product(product_id: str, repository: ProductRepository = Depends(get_repository)):
    return {"success": True, "data": repository.delete(product_id)}
