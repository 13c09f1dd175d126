from fastapi import Depends, Request
from realestate_api.config import settings
from realestate_api.repositories.properties import MongoPropertyRepository
from realestate_api.services.properties import PropertyService
from realestate_api.storage.images import LocalImageStorage

def get_repository(request: Request) -> MongoPropertyRepository:
    """Repository bound to the collection opened at application startup."""
    return MongoPropertyRepository(request.app.state.properties_collection)

def get_storage() -> LocalImageStorage:
    return LocalImageStorage(settings.STATIC_DIR)

def get_property_service(
    repository: MongoPropertyRepository = Depends(get_repository),
    storage: LocalImageStorage = Depends(get_storage),
) -> PropertyService:
    return PropertyService(repository, storage, image_folder=settings.IMAGES_FOLDER)

def get_public_base_url(request: Request) -> str:
    # Stored image keys are relative; resolve them against the configured
    # public URL, or the host that received this request.
    return settings.PUBLIC_BASE_URL or str(request.base_url)
