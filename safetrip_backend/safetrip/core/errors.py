"""
SafeTrip — Error Types
Exceptions the API layer turns into `{"error": ...}` JSON responses.
"""


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class StoreError(Exception):
    """The trip/hazard store rejected or failed an operation."""
