from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    MONGO_URL: str = "mongodb://localhost:27017"
    MONGO_DATABASE: str = "realestate"
    MONGO_COLLECTION: str = "properties"
    STATIC_DIR: str = "wwwroot"
    IMAGES_FOLDER: str = "images"
    # When unset, image URLs are resolved against the host serving the request
    PUBLIC_BASE_URL: str | None = None

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
