# API package
from .client import ApiClient, ApiError
