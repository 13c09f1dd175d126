import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from structlog import get_logger
from realestate_web.services.properties import ApiError, PropertyApiClient, PropertyConflictError

logger = get_logger()

CREATE_SUCCESS = "Correctly registered property!"
CONFLICT_FALLBACK = "A property with that name and address already exists."
CREATE_ERROR = "There was an error saving the property"

_REQUIRED_MESSAGES = {
    "idOwner": "Owner ID is required",
    "name": "The name is required",
    "address": "Address is mandatory",
}

class ImageUpload(BaseModel):
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

class PropertyForm(BaseModel):
    """Create-form input, checked before anything is sent to the API."""
    idOwner: Any = None
    name: Any = None
    address: Any = None
    price: Any = None
    images: List[ImageUpload] = []

    @field_validator("idOwner", "name", "address")
    @classmethod
    def check_required(cls, value: Any, info: ValidationInfo) -> str:
        if value is None or not str(value).strip():
            raise PydanticCustomError("required", _REQUIRED_MESSAGES[info.field_name])
        return str(value)

    @field_validator("price")
    @classmethod
    def check_price(cls, value: Any) -> float:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PydanticCustomError("required", "The price is required")
        try:
            price = float(value)
        except (TypeError, ValueError):
            price = math.nan
        if not math.isfinite(price):
            raise PydanticCustomError("number", "The price must be a number")
        if price < 1:
            raise PydanticCustomError("min", "The price must be greater than 0")
        return price

    @field_validator("images")
    @classmethod
    def check_images(cls, value: List[ImageUpload]) -> List[ImageUpload]:
        if len(value) != 1:
            raise PydanticCustomError("image", "You must upload an image")
        return value

    @property
    def image(self) -> ImageUpload:
        return self.images[0]

@dataclass
class FormOutcome:
    """Result of a create submission: either a redirect notice or field/form errors."""
    success: bool
    message: Optional[str] = None
    field_errors: Optional[Dict[str, str]] = None

def validate_form(data: Dict[str, Any], images: List[ImageUpload]) -> tuple[Optional[PropertyForm], Dict[str, str]]:
    try:
        form = PropertyForm(
            idOwner=data.get("idOwner"),
            name=data.get("name"),
            address=data.get("address"),
            price=data.get("price"),
            images=images,
        )
    except ValidationError as e:
        errors = {str(err["loc"][0]): err["msg"] for err in e.errors()}
        return None, errors
    return form, {}

async def submit_form(client: PropertyApiClient, data: Dict[str, Any], images: List[ImageUpload]) -> FormOutcome:
    form, errors = validate_form(data, images)
    if form is None:
        return FormOutcome(success=False, field_errors=errors)

    try:
        await client.create_property(
            id_owner=form.idOwner,
            name=form.name,
            address=form.address,
            price=form.price,
            image_filename=form.image.filename,
            image_content=form.image.content,
            image_content_type=form.image.content_type,
        )
    except PropertyConflictError as e:
        logger.info("Property already exists", name=form.name, address=form.address)
        return FormOutcome(success=False, message=e.message or CONFLICT_FALLBACK)
    except ApiError as e:
        logger.error("Error saving property", status_code=e.status_code, error=e.message)
        return FormOutcome(success=False, message=CREATE_ERROR)

    logger.info("Registered property", name=form.name)
    return FormOutcome(success=True, message=CREATE_SUCCESS)
