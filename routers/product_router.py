import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status

from infrastructure.database.models.users import User
from routers.dependencies import get_current_user, get_product_service
from schemas import (
    ApiResponse,
    ProductCreate,
    ProductPage,
    ProductResponse,
    ProductUpdate,
    success_response,
)
from services.errors import BadRequestError
from services.images import ImageFile
from services.products import ProductService

router = APIRouter()
logger = logging.getLogger(__name__)


async def read_image_files(files: Optional[List[UploadFile]]) -> List[ImageFile]:
    images = []
    for upload in files or []:
        images.append(
            ImageFile(
                filename=upload.filename or "upload",
                content_type=upload.content_type or "application/octet-stream",
                data=await upload.read(),
            )
        )
    return images


def _parse_url_list(raw: Optional[str], field_name: str) -> Optional[List[str]]:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise BadRequestError(f"Invalid {field_name} format. Must be a valid JSON array.") from exc
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise BadRequestError(f"Invalid {field_name} format. Must be a valid JSON array.")
    return value


@router.get("/products", response_model=ApiResponse[ProductPage], summary="List products")
async def list_products(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Items per page"),
    search: Optional[str] = Query(None, description="Matches name or description"),
    service: ProductService = Depends(get_product_service),
):
    result = await service.list_products(page=page, limit=limit, search=search)
    page_payload = ProductPage(
        items=[ProductResponse.model_validate(product) for product in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )
    return success_response(200, "Products retrieved successfully", page_payload)


@router.get("/products/{product_id}", response_model=ApiResponse[ProductResponse], summary="Get a product")
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_one(product_id)
    return success_response(200, "Product retrieved successfully", ProductResponse.model_validate(product))


@router.post(
    "/products",
    response_model=ApiResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    payload: ProductCreate,
    current_user: User = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    product = await service.create(payload, current_user)
    return success_response(201, "Product created successfully", ProductResponse.model_validate(product))


@router.post(
    "/products/with-images",
    response_model=ApiResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a product with image upload",
)
async def create_product_with_images(
    name: str = Form(...),
    price: str = Form(...),
    description: Optional[str] = Form(None),
    image_urls: Optional[str] = Form(None, alias="imageUrls", description="JSON array of image URLs"),
    images: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    files = await read_image_files(images)
    fields = {
        "name": name,
        "price": price,
        "description": description,
        "images": _parse_url_list(image_urls, "imageUrls") or [],
    }
    product = await service.create_with_images(fields, files, current_user)
    return success_response(
        201,
        "Product created with images successfully",
        ProductResponse.model_validate(product),
    )


@router.patch(
    "/products/{product_id}",
    response_model=ApiResponse[ProductResponse],
    summary="Update a product",
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": ProductUpdate.model_json_schema(by_alias=True)}}
        }
    },
)
async def update_product(
    product_id: str,
    payload: Dict[str, Any] = Body(..., description="Fields to change, shaped like ProductUpdate"),
    current_user: User = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    # Field types are checked by the service, after ownership.
    product = await service.update(product_id, payload, current_user)
    return success_response(200, "Product updated successfully", ProductResponse.model_validate(product))


@router.put(
    "/products/{product_id}",
    response_model=ApiResponse[ProductResponse],
    summary="Update a product with optional image upload",
)
async def update_product_with_images(
    product_id: str,
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    existing_images: Optional[str] = Form(
        None,
        alias="existingImages",
        description="JSON array of existing image URLs to keep",
    ),
    images: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    await service.get_owned(product_id, current_user, action="update")
    files = await read_image_files(images)
    logger.info(
        "Update request for product %s by user %s with %d new file(s)",
        product_id,
        current_user.id,
        len(files),
    )
    changes = {
        key: value
        for key, value in (("name", name), ("price", price), ("description", description))
        if value is not None
    }
    product = await service.update_with_images(
        product_id,
        changes,
        current_user,
        keep_images=_parse_url_list(existing_images, "existingImages"),
        files=files,
    )
    return success_response(200, "Product updated successfully", ProductResponse.model_validate(product))


@router.delete("/products/{product_id}", response_model=ApiResponse[None], summary="Delete a product")
async def delete_product(
    product_id: str,
    current_user: User = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    await service.remove(product_id, current_user)
    return success_response(200, "Product deleted successfully")
