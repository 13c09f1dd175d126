import re
from decimal import Decimal
from types import SimpleNamespace
import pytest
from bson import Decimal128, ObjectId
from realestate_api.repositories.properties import MongoPropertyRepository
from realestate_api.storage.images import LocalImageStorage

def _plain(value):
    return value.to_decimal() if isinstance(value, Decimal128) else value

def _matches(doc: dict, query: dict) -> bool:
    for key, cond in query.items():
        value = _plain(doc.get(key))
        if isinstance(cond, dict):
            if "$regex" in cond:
                flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
                if value is None or not re.search(cond["$regex"], value, flags):
                    return False
            if "$gte" in cond and not (value is not None and value >= _plain(cond["$gte"])):
                return False
            if "$lte" in cond and not (value is not None and value <= _plain(cond["$lte"])):
                return False
        elif value != _plain(cond):
            return False
    return True

class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    async def to_list(self, length=None):
        return list(self.docs)

class FakeCollection:
    """In-memory stand-in for the handful of motor collection calls the repository makes."""

    def __init__(self):
        self.docs = []

    def find(self, query):
        return FakeCursor([dict(d) for d in self.docs if _matches(d, query)])

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                return dict(doc)
        return None

    async def insert_one(self, doc):
        doc = dict(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def delete_one(self, query):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

def _make_document(name, address="1 Main", price=100, owner="o1", image="images/a.png"):
    return {
        "_id": ObjectId(),
        "IdOwner": owner,
        "Name": name,
        "Address": address,
        "Price": Decimal128(Decimal(str(price))),
        "ImageUrl": image,
    }

@pytest.fixture
def collection():
    return FakeCollection()

@pytest.fixture
def repository(collection):
    return MongoPropertyRepository(collection)

@pytest.fixture
def storage(tmp_path):
    return LocalImageStorage(tmp_path)

@pytest.fixture
def make_document():
    return _make_document

@pytest.fixture
def png_bytes():
    # PNG signature plus padding; the API never decodes images
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
