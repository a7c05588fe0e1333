from .base import BaseClient
from .rest_client import RestClient

__all__ = ["BaseClient", "RestClient"]
