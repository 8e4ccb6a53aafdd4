# errors.py

from typing import Optional


class BlogError(Exception):
    """Base class for errors the API turns into an error response."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details  # diagnostic only


class ValidationError(BlogError):
    status_code = 400


class NotFoundError(BlogError):
    status_code = 404

    def __init__(self, message: str = "Post not found", details: Optional[str] = None):
        super().__init__(message, details)


class StorageError(BlogError):
    status_code = 500


# --- Client-side errors ---

class StaleSnapshotError(BlogError):
    """An action targets a post that is not in the current snapshot."""

    status_code = 404

    def __init__(self, post_id: str):
        super().__init__(f"Post {post_id} is not in the current snapshot")
        self.post_id = post_id


class ApiError(Exception):
    """Non-2xx response from the posts API."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
