from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

@dataclass
class Property:
    """A real-estate listing as held by the catalog.

    `image_url` carries the stored image key (e.g. "images/<token>.png");
    it is turned into a public URL only when the record leaves the API.
    """
    owner_id: str
    name: str
    address: str
    price: Decimal
    image_url: str = ""
    id: Optional[str] = None
