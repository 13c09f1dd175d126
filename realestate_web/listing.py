import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from structlog import get_logger
from realestate_web.services.properties import ApiError, Property, PropertyApiClient

logger = get_logger()

LOAD_ERROR = "There was an error loading the properties."
DELETE_SUCCESS = "Property successfully deleted."
DELETE_ERROR = "Error deleting property."

def _parse_price(value: str) -> Optional[float]:
    # Zero and unparseable bounds behave like an empty input
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price or None

@dataclass
class Filters:
    """Raw filter inputs as typed into the list form."""
    name: str = ""
    address: str = ""
    min_price: str = ""
    max_price: str = ""

    def as_query(self) -> dict:
        return {
            "name": self.name.strip() or None,
            "address": self.address.strip() or None,
            "min_price": _parse_price(self.min_price),
            "max_price": _parse_price(self.max_price),
        }

@dataclass
class Notice:
    level: str
    text: str

@dataclass
class PropertyListView:
    """List state: filters, the full result set and an in-memory pager.

    The server does the filtering; pagination only slices what was fetched.
    """
    client: PropertyApiClient
    page_size: int = 6
    filters: Filters = field(default_factory=Filters)
    properties: List[Property] = field(default_factory=list)
    current_page: int = 1
    error: Optional[str] = None
    deleting_id: Optional[str] = None

    async def load(self) -> None:
        try:
            self.properties = await self.client.get_properties(**self.filters.as_query())
            self.error = None
        except ApiError as e:
            logger.error("Error loading properties", error=e.message)
            self.error = LOAD_ERROR

    async def apply_filters(self, filters: Filters) -> None:
        self.filters = filters
        self.current_page = 1
        await self.load()

    async def clear_filters(self) -> None:
        await self.apply_filters(Filters())

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.properties) / self.page_size)

    @property
    def page_numbers(self) -> List[int]:
        return list(range(1, self.total_pages + 1))

    @property
    def page_items(self) -> List[Property]:
        start = (self.current_page - 1) * self.page_size
        return self.properties[start:start + self.page_size]

    def change_page(self, page: int) -> None:
        if 1 <= page <= self.total_pages:
            self.current_page = page

    async def delete(self, property_id: str, confirm: Callable[[], bool], reload: bool = True) -> Optional[Notice]:
        """Delete after confirmation; returns the notice to show, or None if cancelled.

        Pass `reload=False` when the caller fetches the list itself afterwards.
        """
        if not confirm():
            return None
        self.deleting_id = property_id
        try:
            try:
                await self.client.delete_property(property_id)
            except ApiError as e:
                logger.error("Error deleting property", property_id=property_id, error=e.message)
                return Notice("error", DELETE_ERROR)
            if reload:
                await self.load()
            return Notice("success", DELETE_SUCCESS)
        finally:
            self.deleting_id = None
