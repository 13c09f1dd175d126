from typing import Any, Dict, List, Optional
from httpx import AsyncClient, AsyncBaseTransport, HTTPError, Response
from pydantic import BaseModel
from structlog import get_logger

logger = get_logger()

class Property(BaseModel):
    id: str
    idOwner: str
    name: str
    address: str
    price: float
    imageUrl: str

class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

class PropertyConflictError(ApiError):
    """The API refused a create because the name and address are taken."""

def _error_message(resp: Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        return data.get("message") or str(data.get("detail") or f"HTTP {resp.status_code}")
    return str(data)

class PropertyApiClient:
    """Thin async wrapper around the catalog's /properties endpoints."""

    def __init__(self, base_url: str, timeout: float = 30.0, transport: Optional[AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> AsyncClient:
        return AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _send(self, method: str, path: str, **kwargs) -> Response:
        async with self._client() as client:
            try:
                resp = await client.request(method, path, **kwargs)
            except HTTPError as e:
                logger.error("Property API unreachable", method=method, path=path, error=str(e))
                raise ApiError(0, f"Property API unreachable: {e}") from e
        return resp

    async def get_properties(
        self,
        name: Optional[str] = None,
        address: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Property]:
        params: Dict[str, Any] = {
            "name": name,
            "address": address,
            "minPrice": min_price,
            "maxPrice": max_price,
        }
        # Remove unset and empty filters
        params = {k: v for k, v in params.items() if v}
        resp = await self._send("GET", "/properties", params=params)
        if resp.status_code != 200:
            logger.error("Error fetching properties", status_code=resp.status_code)
            raise ApiError(resp.status_code, _error_message(resp))
        return [Property(**item) for item in resp.json()]

    async def get_property_by_id(self, property_id: str) -> Optional[Property]:
        resp = await self._send("GET", f"/properties/{property_id}")
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            logger.error("Error fetching property", property_id=property_id, status_code=resp.status_code)
            raise ApiError(resp.status_code, _error_message(resp))
        return Property(**resp.json())

    async def create_property(
        self,
        id_owner: str,
        name: str,
        address: str,
        price: float,
        image_filename: str,
        image_content: bytes,
        image_content_type: str = "application/octet-stream",
    ) -> Property:
        data = {"idOwner": id_owner, "name": name, "address": address, "price": str(price)}
        files = {"image": (image_filename, image_content, image_content_type)}
        resp = await self._send("POST", "/properties", data=data, files=files)
        if resp.status_code == 409:
            raise PropertyConflictError(409, _error_message(resp))
        if resp.status_code != 201:
            logger.error("Error creating property", name=name, status_code=resp.status_code)
            raise ApiError(resp.status_code, _error_message(resp))
        return Property(**resp.json())

    async def delete_property(self, property_id: str) -> None:
        resp = await self._send("DELETE", f"/properties/{property_id}")
        if resp.status_code != 204:
            logger.error("Error deleting property", property_id=property_id, status_code=resp.status_code)
            raise ApiError(resp.status_code, _error_message(resp))
