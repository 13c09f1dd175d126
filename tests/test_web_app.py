import pytest
from unittest.mock import AsyncMock
from httpx import ASGITransport, AsyncClient
from realestate_api.dependencies.properties import get_repository, get_storage
from realestate_api.main import app as api_app
from realestate_web.main import app as web_app, get_api_client
from realestate_web.services.properties import PropertyApiClient

@pytest.fixture
def web(repository, storage):
    # The frontend talks to the real API app in-process
    api_app.dependency_overrides[get_repository] = lambda: repository
    api_app.dependency_overrides[get_storage] = lambda: storage
    api_client = PropertyApiClient("http://api.test/api", transport=ASGITransport(app=api_app))
    web_app.dependency_overrides[get_api_client] = lambda: api_client
    yield AsyncClient(transport=ASGITransport(app=web_app), base_url="http://web.test")
    api_app.dependency_overrides.clear()
    web_app.dependency_overrides.clear()

@pytest.mark.asyncio
async def test_empty_catalog(web):
    async with web:
        response = await web.get("/")
        assert response.status_code == 200
        assert "No properties found." in response.text

@pytest.mark.asyncio
async def test_list_paginates_and_keeps_filters(web, collection, make_document):
    collection.docs += [make_document(f"Villa {i}", price=100 * i) for i in range(1, 9)]
    async with web:
        response = await web.get("/", params={"name": "villa"})
        assert response.text.count('class="card"') == 6
        assert "/?name=villa&amp;page=2" in response.text

        response = await web.get("/", params={"name": "villa", "page": 2})
        assert response.text.count('class="card"') == 2

@pytest.mark.asyncio
async def test_create_then_delete_through_the_forms(web, collection, png_bytes):
    async with web:
        response = await web.post(
            "/new",
            data={"idOwner": "o1", "name": "Test", "address": "1 Main", "price": "100000"},
            files={"image": ("house.png", png_bytes, "image/png")},
        )
        assert response.status_code == 303
        assert "Correctly+registered+property" in response.headers["location"]
        assert len(collection.docs) == 1

        property_id = str(collection.docs[0]["_id"])
        response = await web.get(f"/properties/{property_id}")
        assert response.status_code == 200
        assert "Owner:</strong> o1" in response.text

        response = await web.post(f"/properties/{property_id}/delete")
        assert response.status_code == 303
        assert "successfully+deleted" in response.headers["location"]
        assert collection.docs == []

@pytest.mark.asyncio
async def test_duplicate_create_shows_conflict_message(web, png_bytes):
    data = {"idOwner": "o1", "name": "Test", "address": "1 Main", "price": "100000"}
    async with web:
        await web.post("/new", data=data, files={"image": ("house.png", png_bytes, "image/png")})
        response = await web.post("/new", data=data, files={"image": ("house.png", png_bytes, "image/png")})
        assert response.status_code == 200
        assert "A property already exists with that name and address." in response.text

@pytest.mark.asyncio
async def test_invalid_form_is_redisplayed_with_errors(web):
    async with web:
        response = await web.post("/new", data={"idOwner": "", "name": "Test", "address": "1 Main", "price": "0"})
        assert response.status_code == 400
        assert "Owner ID is required" in response.text
        assert "The price must be greater than 0" in response.text
        assert "You must upload an image" in response.text

@pytest.mark.asyncio
async def test_missing_property_detail_is_404(web):
    async with web:
        response = await web.get("/properties/64b7f0c2a1b2c3d4e5f60718")
        assert response.status_code == 404

@pytest.mark.asyncio
async def test_delete_route_leaves_list_fetch_to_redirect(web, collection, make_document, monkeypatch):
    collection.docs.append(make_document("Villa Sol"))
    get_properties = AsyncMock(return_value=[])
    monkeypatch.setattr(PropertyApiClient, "get_properties", get_properties)
    async with web:
        response = await web.post(f"/properties/{collection.docs[0]['_id']}/delete")
        assert response.status_code == 303
        assert collection.docs == []
    get_properties.assert_not_awaited()

@pytest.mark.asyncio
async def test_list_page_has_no_loading_placeholder(web, collection, make_document):
    collection.docs.append(make_document("Villa Sol"))
    async with web:
        response = await web.get("/")
        assert "Villa Sol" in response.text
        assert "Loading" not in response.text
