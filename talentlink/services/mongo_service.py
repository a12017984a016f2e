"""
MongoDB Service - shared helpers for the document collections.

Collections in this database:
1. users - profiles, credentials, embedded connection entries
2. jobs  - job postings, embedded applications
3. posts - social posts, embedded likes and comments

References between documents are stored as ObjectIds. Before a document
leaves the service layer it is "populated" (referenced users replaced by a
small {id, name, avatar} summary) and serialized (ObjectIds turned into
strings, ``_id`` renamed to ``id``).
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection

from talentlink.db.mongodb import get_collection, COLLECTIONS
from talentlink.utils.pagination import build_pagination, page_offset


# Fields exposed whenever another document references a user
USER_SUMMARY_PROJECTION = {"name": 1, "avatar": 1}


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what pymongo hands back from reads."""
    return datetime.utcnow()


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a path/query id. Returns None for malformed ids."""
    if value is None:
        return None
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def same_id(a: Any, b: Any) -> bool:
    """True when both values parse to the same ObjectId (hex case is ignored)."""
    oid = to_object_id(a)
    return oid is not None and oid == to_object_id(b)


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, list):
        return [serialize_value(item) for item in value]
    return value


def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document (and its sub-documents) to a JSON-friendly dict."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if key == "_id":
            out["id"] = serialize_value(value)
        else:
            out[key] = serialize_value(value)
    return out


def serialize_docs(docs: Iterable[dict]) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


# ============================================================
# HELPER: Populate user references
# ============================================================

def load_user_summaries(user_ids: Iterable[ObjectId]) -> Dict[ObjectId, dict]:
    """Fetch {id, name, avatar} for every referenced user in one query."""
    ids = list({uid for uid in user_ids if uid is not None})
    if not ids:
        return {}
    users: Collection = get_collection(COLLECTIONS["users"])
    cursor = users.find({"_id": {"$in": ids}}, USER_SUMMARY_PROJECTION)
    return {doc["_id"]: doc for doc in cursor}


def user_summary(user_id: ObjectId, summaries: Dict[ObjectId, dict]) -> dict:
    doc = summaries.get(user_id)
    if doc is None:
        # Dangling reference: keep the id so clients can still link to it
        return {"_id": user_id, "name": None, "avatar": None}
    return doc


def populate_entries(entries: List[dict], summaries: Dict[ObjectId, dict], key: str = "user") -> List[dict]:
    """Replace ``entry[key]`` with the user's summary for every embedded entry."""
    return [{**entry, key: user_summary(entry.get(key), summaries)} for entry in entries]


# ============================================================
# HELPER: Paginated find
# ============================================================

def find_page(
    collection: Collection,
    query: dict,
    sort: List[Tuple[str, int]],
    page: int,
    limit: int,
    projection: dict = None
) -> Tuple[List[dict], Dict[str, int]]:
    """
    Run one page of ``query`` and count the whole match set.

    Pages past the end yield an empty list, never an error.
    """
    cursor = (
        collection.find(query, projection)
        .sort(sort)
        .skip(page_offset(page, limit))
        .limit(limit)
    )
    docs = list(cursor)
    total = collection.count_documents(query)
    return docs, build_pagination(page, limit, total)
