"""External service clients."""

from .monday import MondayClient, MondayAPIError, MissingEmailError
from .zoho import ZohoClient, ZohoAuthError

__all__ = [
    "MondayClient",
    "MondayAPIError",
    "MissingEmailError",
    "ZohoClient",
    "ZohoAuthError",
]
