"""
Schemas module - Request/Response schemas for API endpoints.

Documents in MongoDB are plain dicts; these schemas are the API contract
(what the client sends and receives). See ``talentlink.schemas.schemas``.
"""
