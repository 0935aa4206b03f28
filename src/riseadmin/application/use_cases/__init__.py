from .base import UseCase, UseCaseRequest, UseCaseResponse
from .upload_cropped_image import (
    UploadCroppedImageRequest,
    UploadCroppedImageResponse,
    UploadCroppedImageUseCase,
)

__all__ = [
    "UploadCroppedImageRequest",
    "UploadCroppedImageResponse",
    "UploadCroppedImageUseCase",
    "UseCase",
    "UseCaseRequest",
    "UseCaseResponse",
]
