from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
import pytest
from bson import Decimal128
from pymongo.errors import ServerSelectionTimeoutError
from realestate_api.errors import RepositoryError
from realestate_api.models.property import Property
from realestate_api.repositories.properties import MongoPropertyRepository, build_filter

def test_build_filter_without_arguments_matches_everything():
    assert build_filter() == {}
    assert build_filter(name="  ", address="") == {}

def test_build_filter_escapes_text_and_bounds_price():
    query = build_filter(name="Villa (Sol)", min_price=Decimal("150"), max_price=Decimal("300"))
    assert query["Name"] == {"$regex": r"Villa\ \(Sol\)", "$options": "i"}
    assert query["Price"] == {"$gte": Decimal128("150"), "$lte": Decimal128("300")}
    assert "Address" not in query

@pytest.mark.asyncio
async def test_list_filters_by_min_price(repository, collection, make_document):
    collection.docs += [make_document("Villa Sol", price=100), make_document("Casa Luna", price=300)]
    result = await repository.list(min_price=Decimal("150"))
    assert [p.name for p in result] == ["Casa Luna"]

@pytest.mark.asyncio
async def test_list_name_filter_is_case_insensitive(repository, collection, make_document):
    collection.docs += [make_document("Villa Sol", price=100), make_document("Casa Luna", price=300)]
    result = await repository.list(name="villa")
    assert [p.name for p in result] == ["Villa Sol"]
    assert result[0].price == Decimal("100")

@pytest.mark.asyncio
async def test_list_price_bounds_are_inclusive(repository, collection, make_document):
    collection.docs += [make_document("A", price=100), make_document("B", price=200), make_document("C", price=300)]
    result = await repository.list(min_price=Decimal("100"), max_price=Decimal("200"))
    assert sorted(p.name for p in result) == ["A", "B"]

@pytest.mark.asyncio
async def test_get_by_id_treats_malformed_id_as_absent(repository, collection, make_document):
    collection.docs.append(make_document("Villa Sol"))
    assert await repository.get_by_id("not-an-object-id") is None

@pytest.mark.asyncio
async def test_add_assigns_id_and_round_trips(repository):
    prop = Property(owner_id="o1", name="Test", address="1 Main", price=Decimal("100000"), image_url="images/x.png")
    created = await repository.add(prop)
    assert created.id
    fetched = await repository.get_by_id(created.id)
    assert fetched == created

@pytest.mark.asyncio
async def test_add_rejects_property_with_id(repository):
    prop = Property(owner_id="o1", name="Test", address="1 Main", price=Decimal("1"), id="abc")
    with pytest.raises(ValueError):
        await repository.add(prop)

@pytest.mark.asyncio
async def test_delete_reports_whether_a_record_was_removed(repository, collection, make_document):
    doc = make_document("Villa Sol")
    collection.docs.append(doc)
    assert await repository.delete(str(doc["_id"])) is True
    assert await repository.delete(str(doc["_id"])) is False
    assert await repository.delete("garbage") is False

@pytest.mark.asyncio
async def test_exists_by_name_and_address_is_exact(repository, collection, make_document):
    collection.docs.append(make_document("Villa Sol", address="1 Main"))
    assert await repository.exists_by_name_and_address("Villa Sol", "1 Main") is True
    assert await repository.exists_by_name_and_address("villa sol", "1 Main") is False
    assert await repository.exists_by_name_and_address("Villa Sol", "2 Main") is False

@pytest.mark.asyncio
async def test_store_errors_are_wrapped():
    collection = MagicMock()
    collection.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
    repository = MongoPropertyRepository(collection)
    with pytest.raises(RepositoryError, match="no servers"):
        await repository.exists_by_name_and_address("Villa Sol", "1 Main")

def test_build_filter_rejects_prices_decimal128_cannot_hold():
    with pytest.raises(RepositoryError):
        build_filter(min_price=Decimal("0.12345678901234567890123456789012345678"))
