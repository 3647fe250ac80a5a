from .image_storage import ImageFile, ImageStorageService

__all__ = ["ImageFile", "ImageStorageService"]
