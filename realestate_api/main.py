from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError
from structlog import get_logger
from realestate_api.config import settings
from realestate_api.errors import RepositoryError
from realestate_api.routers import properties

logger = get_logger()

app = FastAPI(title="Real Estate Catalog API")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

@app.on_event("startup")
async def startup_event():
    # One client for the lifetime of the process; repositories get the collection
    client = AsyncIOMotorClient(settings.MONGO_URL)
    app.state.mongo_client = client
    app.state.properties_collection = client[settings.MONGO_DATABASE][settings.MONGO_COLLECTION]
    Path(settings.STATIC_DIR, settings.IMAGES_FOLDER).mkdir(parents=True, exist_ok=True)
    logger.info("Connected to MongoDB", database=settings.MONGO_DATABASE, collection=settings.MONGO_COLLECTION)

@app.on_event("shutdown")
async def shutdown_event():
    client = getattr(app.state, "mongo_client", None)
    if client:
        client.close()

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected invalid request", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )

@app.exception_handler(RepositoryError)
async def repository_exception_handler(request: Request, exc: RepositoryError):
    return JSONResponse(status_code=500, content={"message": "Internal Server Error", "detail": str(exc)})

app.include_router(properties.router)

@app.get("/health")
async def root_health():
    return "ok"

@app.get("/api/health")
async def database_health():
    """Ping MongoDB through the application's client."""
    try:
        await app.state.mongo_client.admin.command("ping")
    except (PyMongoError, AttributeError) as e:
        logger.error("MongoDB health check failed", error=str(e))
        return JSONResponse(status_code=503, content={"status": "error", "detail": str(e)})
    return {"status": "ok"}

app.mount(
    f"/{settings.IMAGES_FOLDER}",
    StaticFiles(directory=str(Path(settings.STATIC_DIR, settings.IMAGES_FOLDER)), check_dir=False),
    name="images",
)
