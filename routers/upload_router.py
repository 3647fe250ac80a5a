from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from routers.dependencies import get_current_user, get_image_storage_service
from routers.product_router import read_image_files
from schemas import ApiResponse, success_response
from services.images import ImageStorageService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post(
    "/upload/single",
    response_model=ApiResponse[dict],
    status_code=status.HTTP_201_CREATED,
    summary="Upload a single image",
)
async def upload_single(
    image: Optional[UploadFile] = File(None),
    storage: ImageStorageService = Depends(get_image_storage_service),
):
    files = await read_image_files([image] if image else [])
    image_url = await storage.upload(files[0] if files else None)
    return success_response(201, "Image uploaded successfully", {"imageUrl": image_url})


@router.post(
    "/upload/multiple",
    response_model=ApiResponse[dict],
    status_code=status.HTTP_201_CREATED,
    summary="Upload multiple images (max 5)",
)
async def upload_multiple(
    images: Optional[List[UploadFile]] = File(None),
    storage: ImageStorageService = Depends(get_image_storage_service),
):
    files = await read_image_files(images)
    image_urls = await storage.upload_many(files)
    return success_response(201, "Images uploaded successfully", {"imageUrls": image_urls})
