from .gateway import ImageStoreError, ImageStoreGateway, UploadedImage
from .cloudinary_store import CloudinaryImageStore, extract_public_id

__all__ = [
    "CloudinaryImageStore",
    "ImageStoreError",
    "ImageStoreGateway",
    "UploadedImage",
    "extract_public_id",
]
