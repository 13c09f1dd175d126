from decimal import Decimal
from pydantic import BaseModel
from realestate_api.models.property import Property
from realestate_api.storage.images import resolve_url

class PropertyResponse(BaseModel):
    id: str
    idOwner: str
    name: str
    address: str
    price: float
    imageUrl: str

class PropertyCreate(BaseModel):
    """Fields a client supplies on create; `id` and `imageUrl` are assigned server-side."""
    idOwner: str
    name: str
    address: str
    price: Decimal

class PropertyFilters(BaseModel):
    name: str | None = None
    address: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None

class ErrorResponse(BaseModel):
    message: str
    detail: str | None = None

def to_property(data: PropertyCreate, image_url: str) -> Property:
    return Property(
        owner_id=data.idOwner,
        name=data.name,
        address=data.address,
        price=data.price,
        image_url=image_url,
    )

def to_response(prop: Property, base_url: str) -> PropertyResponse:
    return PropertyResponse(
        id=prop.id or "",
        idOwner=prop.owner_id,
        name=prop.name,
        address=prop.address,
        price=float(prop.price),
        imageUrl=resolve_url(prop.image_url, base_url),
    )
