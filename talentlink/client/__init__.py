"""
Client module - Python client for the TalentLink REST API.
"""
from talentlink.client.api_client import ApiClient, ApiError, CredentialProvider, TokenStore

__all__ = [
    "ApiClient",
    "ApiError",
    "CredentialProvider",
    "TokenStore"
]
