"""
MongoDB Connection Utility

MongoDB stores every TalentLink entity:
- users: profiles, credentials, embedded connection entries
- jobs: job postings with embedded applications
- posts: social posts with embedded likes and comments

Sub-documents (applications, likes, comments, connections) live inside
their parent document, so most writes touch a single document.
"""
import logging

from pymongo import ASCENDING, DESCENDING, TEXT, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from talentlink.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """
    Get a specific collection.
    Collections we use:
    - users
    - jobs
    - posts
    """
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "jobs": "jobs",
    "posts": "posts",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    users = db[COLLECTIONS["users"]]
    users.create_index("email", unique=True)
    users.create_index([("profile_views", DESCENDING)])

    jobs = db[COLLECTIONS["jobs"]]
    # Full-text search for GET /jobs?search=
    jobs.create_index([
        ("title", TEXT),
        ("description", TEXT),
        ("skills", TEXT)
    ])
    jobs.create_index([
        ("location", ASCENDING),
        ("type", ASCENDING),
        ("status", ASCENDING)
    ])
    jobs.create_index([("created_at", DESCENDING)])
    jobs.create_index("posted_by")

    posts = db[COLLECTIONS["posts"]]
    posts.create_index("author")
    posts.create_index([
        ("visibility", ASCENDING),
        ("created_at", DESCENDING)
    ])

    logger.info("MongoDB indexes created successfully")
