from .photos import PhotosRepository
from . import models

__all__ = ["PhotosRepository", "models"]
