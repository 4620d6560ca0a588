"""Remote resource clients."""

from khata.remote.base import RemoteResourceClient
from khata.remote.http_client import DEFAULT_BASE_URL, ENDPOINTS, KhataAPIClient

__all__ = [
    "RemoteResourceClient",
    "KhataAPIClient",
    "DEFAULT_BASE_URL",
    "ENDPOINTS",
]
