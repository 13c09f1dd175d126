class RepositoryError(Exception):
    """Raised when the document store fails underneath a repository call."""


class BlobStorageError(Exception):
    """Raised when an uploaded image cannot be written to the blob store."""
