from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Protocol, TypeVar
from decimal import Decimal
from structlog import get_logger
from realestate_api.errors import BlobStorageError, RepositoryError
from realestate_api.models.property import Property
from realestate_api.schemas.property import PropertyCreate, PropertyFilters, to_property

logger = get_logger()

T = TypeVar("T")

CONFLICT_MESSAGE = "A property already exists with that name and address."
NOT_FOUND_MESSAGE = "The property does not exist."

class ErrorKind(str, Enum):
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INFRASTRUCTURE = "infrastructure"

@dataclass
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error=error, message=message)

class PropertyRepository(Protocol):
    async def list(self, name: str | None = None, address: str | None = None,
                   min_price: Decimal | None = None, max_price: Decimal | None = None) -> list[Property]: ...
    async def get_by_id(self, property_id: str) -> Property | None: ...
    async def add(self, prop: Property) -> Property: ...
    async def delete(self, property_id: str) -> bool: ...
    async def exists_by_name_and_address(self, name: str, address: str) -> bool: ...

class ImageStorage(Protocol):
    async def save(self, data: bytes, filename_hint: str, folder: str) -> str: ...
    async def delete(self, reference: str | None, folder: str) -> None: ...

class PropertyService:
    """Business rules for the catalog, on top of a repository and an image store."""

    def __init__(self, repository: PropertyRepository, storage: ImageStorage, image_folder: str = "images"):
        self.repository = repository
        self.storage = storage
        self.image_folder = image_folder

    async def list_properties(self, filters: PropertyFilters | None = None) -> list[Property]:
        filters = filters or PropertyFilters()
        properties = await self.repository.list(
            name=filters.name,
            address=filters.address,
            min_price=filters.min_price,
            max_price=filters.max_price,
        )
        logger.info("Fetched properties", total_properties=len(properties))
        return properties

    async def get_property(self, property_id: str) -> Property | None:
        return await self.repository.get_by_id(property_id)

    async def create_property(self, data: PropertyCreate, image: bytes, image_filename: str) -> ServiceResult[Property]:
        """Store the image and insert the record.

        The duplicate check runs before the image is written so a rejected
        submission never leaves a file behind. If the insert fails after the
        write, the image is orphaned.
        """
        try:
            if await self.repository.exists_by_name_and_address(data.name, data.address):
                logger.info("Rejected duplicate property", name=data.name, address=data.address)
                return ServiceResult.failure(ErrorKind.CONFLICT, CONFLICT_MESSAGE)

            image_key = await self.storage.save(image, image_filename, self.image_folder)
            prop = await self.repository.add(to_property(data, image_key))
        except (RepositoryError, BlobStorageError) as e:
            return ServiceResult.failure(ErrorKind.INFRASTRUCTURE, str(e))

        logger.info("Created property", property_id=prop.id, owner_id=prop.owner_id)
        return ServiceResult.success(prop)

    async def delete_property(self, property_id: str) -> ServiceResult[bool]:
        try:
            prop = await self.repository.get_by_id(property_id)
            if prop is None:
                logger.info("Property to delete not found", property_id=property_id)
                return ServiceResult.failure(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

            try:
                await self.storage.delete(prop.image_url, self.image_folder)
            except OSError as e:
                # Image removal is best-effort; the record goes regardless
                logger.warning("Could not delete property image", property_id=property_id, error=str(e))
            deleted = await self.repository.delete(property_id)
        except RepositoryError as e:
            return ServiceResult.failure(ErrorKind.INFRASTRUCTURE, str(e))

        logger.info("Deleted property", property_id=property_id, deleted=deleted)
        return ServiceResult.success(deleted)
