from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, Response, UploadFile
from fastapi.responses import JSONResponse
from realestate_api.dependencies.properties import get_property_service, get_public_base_url
from realestate_api.schemas.property import ErrorResponse, PropertyCreate, PropertyFilters, PropertyResponse, to_response
from realestate_api.services.properties import ErrorKind, PropertyService, ServiceResult
from structlog import get_logger

logger = get_logger()
router = APIRouter(prefix="/api/properties", tags=["properties"])

# Prices are stored as Decimal128, which holds at most 34 significant digits
PRICE_MAX_DIGITS = 34
NOT_BLANK = r"^\s*\S"

_STATUS_BY_KIND = {
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INFRASTRUCTURE: 500,
}

def _error_response(result: ServiceResult) -> JSONResponse:
    status_code = _STATUS_BY_KIND[result.error]
    if result.error is ErrorKind.INFRASTRUCTURE:
        logger.error("Property operation failed", error=result.message)
        body = ErrorResponse(message="Internal Server Error", detail=result.message)
    else:
        body = ErrorResponse(message=result.message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))

@router.get("", response_model=List[PropertyResponse])
async def list_properties(
    name: Optional[str] = None,
    address: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, alias="minPrice", max_digits=PRICE_MAX_DIGITS),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", max_digits=PRICE_MAX_DIGITS),
    service: PropertyService = Depends(get_property_service),
    base_url: str = Depends(get_public_base_url),
):
    """
    List properties, optionally filtered by name, address or an inclusive price range.
    """
    filters = PropertyFilters(name=name, address=address, min_price=min_price, max_price=max_price)
    properties = await service.list_properties(filters)
    return [to_response(p, base_url) for p in properties]

@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    responses={404: {"model": ErrorResponse}},
    name="get_property",
)
async def get_property(
    property_id: str,
    service: PropertyService = Depends(get_property_service),
    base_url: str = Depends(get_public_base_url),
):
    prop = await service.get_property(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    logger.info("Fetched property details", property_id=property_id)
    return to_response(prop, base_url)

@router.post(
    "",
    response_model=PropertyResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_property(
    request: Request,
    response: Response,
    id_owner: str = Form(..., alias="idOwner", pattern=NOT_BLANK),
    name: str = Form(..., pattern=NOT_BLANK),
    address: str = Form(..., pattern=NOT_BLANK),
    price: Decimal = Form(..., ge=0, max_digits=PRICE_MAX_DIGITS),
    image: UploadFile = File(...),
    service: PropertyService = Depends(get_property_service),
    base_url: str = Depends(get_public_base_url),
):
    """
    Create a property from a multipart form, storing the uploaded image alongside it.
    """
    data = PropertyCreate(idOwner=id_owner, name=name, address=address, price=price)
    content = await image.read()
    result = await service.create_property(data, content, image.filename or "")
    if not result.succeeded:
        return _error_response(result)

    prop = result.value
    response.headers["Location"] = str(request.url_for("get_property", property_id=prop.id))
    return to_response(prop, base_url)

@router.delete("/{property_id}", status_code=204, responses={404: {"model": ErrorResponse}})
async def delete_property(property_id: str, service: PropertyService = Depends(get_property_service)):
    result = await service.delete_property(property_id)
    if not result.succeeded:
        return _error_response(result)
    return Response(status_code=204)
