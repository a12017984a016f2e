"""
TalentLink
Job board and professional network on a document database.

Architecture:
- MongoDB: users, jobs (embedded applications), posts (embedded likes/comments)
- FastAPI: REST API under /api
- talentlink.client: Python client for that API
"""

__version__ = "1.0.0"
