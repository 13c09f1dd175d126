import re
from decimal import Decimal, DecimalException
from bson import ObjectId, Decimal128
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError
from structlog import get_logger
from realestate_api.errors import RepositoryError
from realestate_api.models.property import Property

logger = get_logger()

def _parse_id(property_id: str) -> ObjectId | None:
    try:
        return ObjectId(property_id)
    except (InvalidId, TypeError):
        return None

def _to_decimal128(value) -> Decimal128:
    try:
        return Decimal128(Decimal(str(value)))
    except DecimalException as e:
        raise RepositoryError(f"Price '{value}' cannot be stored as Decimal128") from e

def build_filter(
    name: str | None = None,
    address: str | None = None,
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
) -> dict:
    """Build the MongoDB query for the list filters.

    Text filters are case-insensitive substring matches, price bounds are
    inclusive, and everything supplied is ANDed together. Blank or missing
    filters add no constraint.
    """
    query: dict = {}
    if name and name.strip():
        query["Name"] = {"$regex": re.escape(name), "$options": "i"}
    if address and address.strip():
        query["Address"] = {"$regex": re.escape(address), "$options": "i"}
    if min_price is not None or max_price is not None:
        query["Price"] = {}
        if min_price is not None:
            query["Price"]["$gte"] = _to_decimal128(min_price)
        if max_price is not None:
            query["Price"]["$lte"] = _to_decimal128(max_price)
    return query

def to_document(prop: Property) -> dict:
    return {
        "IdOwner": prop.owner_id,
        "Name": prop.name,
        "Address": prop.address,
        "Price": _to_decimal128(prop.price),
        "ImageUrl": prop.image_url,
    }

def from_document(doc: dict) -> Property:
    price = doc.get("Price", 0)
    if isinstance(price, Decimal128):
        price = price.to_decimal()
    return Property(
        id=str(doc["_id"]),
        owner_id=doc.get("IdOwner", ""),
        name=doc.get("Name", ""),
        address=doc.get("Address", ""),
        price=Decimal(str(price)),
        image_url=doc.get("ImageUrl", ""),
    )

class MongoPropertyRepository:
    """Property persistence on a MongoDB collection.

    The collection handle is injected; the client that owns it lives for the
    lifetime of the application.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def list(
        self,
        name: str | None = None,
        address: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
    ) -> list[Property]:
        query = build_filter(name, address, min_price, max_price)
        try:
            docs = await self.collection.find(query).to_list(length=None)
        except PyMongoError as e:
            logger.error("Error querying properties", error=str(e))
            raise RepositoryError(f"Error querying properties: {e}") from e
        return [from_document(doc) for doc in docs]

    async def get_by_id(self, property_id: str) -> Property | None:
        oid = _parse_id(property_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Error fetching property", property_id=property_id, error=str(e))
            raise RepositoryError(f"Error fetching property with id '{property_id}': {e}") from e
        return from_document(doc) if doc else None

    async def add(self, prop: Property) -> Property:
        if prop.id is not None:
            raise ValueError("A new property must not carry an id")
        try:
            result = await self.collection.insert_one(to_document(prop))
        except PyMongoError as e:
            logger.error("Error inserting property", name=prop.name, error=str(e))
            raise RepositoryError(f"Error inserting property: {e}") from e
        prop.id = str(result.inserted_id)
        return prop

    async def delete(self, property_id: str) -> bool:
        oid = _parse_id(property_id)
        if oid is None:
            return False
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Error deleting property", property_id=property_id, error=str(e))
            raise RepositoryError(f"Error deleting property with id '{property_id}': {e}") from e
        return result.deleted_count > 0

    async def exists_by_name_and_address(self, name: str, address: str) -> bool:
        try:
            doc = await self.collection.find_one({"Name": name, "Address": address}, {"_id": 1})
        except PyMongoError as e:
            logger.error("Error checking property existence", name=name, error=str(e))
            raise RepositoryError(f"Error checking property existence: {e}") from e
        return doc is not None
