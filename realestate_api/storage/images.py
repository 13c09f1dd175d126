import os
import uuid
from pathlib import Path
from urllib.parse import urlparse
from fastapi.concurrency import run_in_threadpool
from structlog import get_logger
from realestate_api.errors import BlobStorageError

logger = get_logger()

def resolve_url(key: str, base_url: str) -> str:
    """Turn a stored image key into a public URL.

    Keys that already carry a scheme (rows written before keys were stored
    relative) are returned as they are.
    """
    if not key or urlparse(key).scheme:
        return key
    return f"{base_url.rstrip('/')}/{key.lstrip('/')}"

class LocalImageStorage:
    """Keeps uploaded images on the local filesystem under `root_dir`.

    Files are stored as `<root_dir>/<folder>/<token><ext>` and referenced by the
    relative key `<folder>/<token><ext>`, which is also the path the API serves
    them from.
    """

    def __init__(self, root_dir: str | Path):
        self.root_dir = Path(root_dir)

    def _get_abs_path(self, folder: str, file_name: str) -> Path:
        # Only the final path component is honoured to prevent traversal
        return self.root_dir / folder / os.path.basename(file_name)

    async def save(self, data: bytes, filename_hint: str, folder: str) -> str:
        extension = Path(filename_hint or "").suffix
        file_name = f"{uuid.uuid4().hex}{extension}"
        abs_path = self._get_abs_path(folder, file_name)

        def _write():
            abs_path.parent.mkdir(parents=True, exist_ok=True)
            abs_path.write_bytes(data)

        try:
            await run_in_threadpool(_write)
        except OSError as e:
            logger.error("Error saving image", path=str(abs_path), error=str(e))
            raise BlobStorageError(f"Error saving image: {e}") from e
        logger.info("Saved image", file_name=file_name, size=len(data))
        return f"{folder}/{file_name}"

    async def delete(self, reference: str | None, folder: str) -> None:
        if not reference:
            return
        # Accept a key, a filesystem path or an absolute URL
        file_name = os.path.basename(urlparse(reference).path)
        if not file_name:
            return
        abs_path = self._get_abs_path(folder, file_name)
        try:
            await run_in_threadpool(abs_path.unlink, missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete image", path=str(abs_path), error=str(e))
            return
        logger.info("Deleted image", file_name=file_name)
