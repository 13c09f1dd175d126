from pathlib import Path
from typing import Optional
from urllib.parse import urlencode
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile
from structlog import get_logger
from realestate_web.config import settings
from realestate_web.forms import ImageUpload, submit_form
from realestate_web.listing import Filters, PropertyListView
from realestate_web.services.properties import ApiError, PropertyApiClient

logger = get_logger()

app = FastAPI(title="Real Estate Catalog", docs_url=None, redoc_url=None)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

def get_api_client() -> PropertyApiClient:
    return PropertyApiClient(settings.API_BASE_URL)

def _redirect_home(level: str, text: str) -> RedirectResponse:
    return RedirectResponse(f"/?{urlencode({'notice': text, 'level': level})}", status_code=303)

@app.get("/", response_class=HTMLResponse)
async def property_list(
    request: Request,
    name: str = "",
    address: str = "",
    minPrice: str = "",
    maxPrice: str = "",
    page: int = 1,
    notice: Optional[str] = None,
    level: str = "success",
    client: PropertyApiClient = Depends(get_api_client),
):
    view = PropertyListView(client, page_size=settings.PAGE_SIZE)
    await view.apply_filters(Filters(name=name, address=address, min_price=minPrice, max_price=maxPrice))
    view.change_page(page)

    filter_query = {k: v for k, v in {"name": name, "address": address, "minPrice": minPrice, "maxPrice": maxPrice}.items() if v}

    def page_url(number: int) -> str:
        return "/?" + urlencode({**filter_query, "page": number})

    return templates.TemplateResponse(
        request,
        "index.html",
        {"view": view, "filters": view.filters, "page_url": page_url, "notice": notice, "level": level},
    )

@app.get("/properties/{property_id}", response_class=HTMLResponse)
async def property_detail(request: Request, property_id: str, client: PropertyApiClient = Depends(get_api_client)):
    try:
        prop = await client.get_property_by_id(property_id)
    except ApiError as e:
        logger.error("Error loading property", property_id=property_id, error=e.message)
        return _redirect_home("error", "There was an error loading the property.")
    if prop is None:
        return templates.TemplateResponse(request, "not_found.html", {}, status_code=404)
    return templates.TemplateResponse(request, "detail.html", {"property": prop})

@app.post("/properties/{property_id}/delete")
async def property_delete(property_id: str, client: PropertyApiClient = Depends(get_api_client)):
    view = PropertyListView(client, page_size=settings.PAGE_SIZE)
    # The browser has already asked "Delete this property?" before posting.
    # The redirect to the list fetches it again, so no reload here.
    notice = await view.delete(property_id, confirm=lambda: True, reload=False)
    return _redirect_home(notice.level, notice.text)

@app.get("/new", response_class=HTMLResponse)
async def new_property_form(request: Request):
    return templates.TemplateResponse(request, "new.html", {"values": {}, "errors": {}, "message": None})

@app.post("/new", response_class=HTMLResponse)
async def new_property_submit(request: Request, client: PropertyApiClient = Depends(get_api_client)):
    form = await request.form()
    values = {key: form.get(key) for key in ("idOwner", "name", "address", "price")}
    images = []
    for upload in form.getlist("image"):
        # Browsers send an empty part when no file was chosen
        if isinstance(upload, UploadFile) and upload.filename:
            images.append(ImageUpload(
                filename=upload.filename,
                content=await upload.read(),
                content_type=upload.content_type or "application/octet-stream",
            ))

    outcome = await submit_form(client, values, images)
    if outcome.success:
        return _redirect_home("success", outcome.message)

    status_code = 400 if outcome.field_errors else 200
    return templates.TemplateResponse(
        request,
        "new.html",
        {"values": values, "errors": outcome.field_errors or {}, "message": outcome.message},
        status_code=status_code,
    )

@app.get("/health")
async def root_health():
    return "ok"
