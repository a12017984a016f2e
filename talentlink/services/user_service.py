"""
User Service - profiles, credentials and connection requests.

Connection entries are embedded in both participants' documents:
    requester.connections -> {user: target,    direction: "outgoing", status}
    target.connections    -> {user: requester, direction: "incoming", status}
Both entries carry the same status.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from pymongo import ReturnDocument
from pymongo.collection import Collection

from talentlink.core.config import get_settings
from talentlink.db.mongodb import get_collection, COLLECTIONS
from talentlink.schemas.schemas import ConnectionDirection, ConnectionStatus, UserRole
from talentlink.services.mongo_service import (
    find_page,
    load_user_summaries,
    populate_entries,
    same_id,
    serialize_doc,
    serialize_docs,
    to_object_id,
    utcnow,
)

logger = logging.getLogger(__name__)

settings = get_settings()

# Never leaves the service layer
PRIVATE_PROJECTION = {"password_hash": 0}
PUBLIC_PROJECTION = {"password_hash": 0, "email": 0, "wallet_address": 0}
SEARCH_PROJECTION = {
    "name": 1, "avatar": 1, "bio": 1, "location": 1,
    "skills": 1, "profile_views": 1, "role": 1, "is_verified": 1
}


class UserService:
    """
    Handles the users collection.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["users"])

    # ------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str = UserRole.user.value,
        wallet_address: Optional[str] = None
    ) -> dict:
        """
        Insert a new user. Raises DuplicateKeyError when the unique email
        index already holds ``email``.
        """
        now = utcnow()
        doc = {
            "name": name,
            "email": email.lower(),
            "password_hash": password_hash,
            "avatar": settings.default_avatar,
            "bio": None,
            "location": None,
            "linked_in": None,
            "skills": [],
            "wallet_address": wallet_address,
            "role": role,
            "is_verified": False,
            "profile_views": 0,
            "connections": [],
            "created_at": now,
            "updated_at": now
        }
        result = self.collection.insert_one(doc)
        logger.info("User registered: %s", result.inserted_id)
        return self.get_private_profile(result.inserted_id)

    def email_exists(self, email: str) -> bool:
        return self.collection.count_documents({"email": email.lower()}, limit=1) > 0

    def get_credentials(self, email: str) -> Optional[dict]:
        """Fetch user by email INCLUDING password hash (login only)."""
        doc = self.collection.find_one({"email": email.lower()})
        return serialize_doc(doc)

    def get_by_id(self, user_id) -> Optional[dict]:
        """Fetch user by id, without password hash. Connections are not populated."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid}, PRIVATE_PROJECTION)
        return serialize_doc(doc)

    # ------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------

    def _with_connections(self, doc: dict) -> dict:
        entries = doc.get("connections", [])
        summaries = load_user_summaries(entry.get("user") for entry in entries)
        doc["connections"] = populate_entries(entries, summaries)
        return doc

    def get_private_profile(self, user_id) -> Optional[dict]:
        """Own profile: everything except the password hash."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid}, PRIVATE_PROJECTION)
        if doc is None:
            return None
        return serialize_doc(self._with_connections(doc))

    def get_public_profile(self, user_id) -> Optional[dict]:
        """
        Profile as seen by anyone. Counts a profile view.

        The returned ``profile_views`` is the value read plus one; the
        increment itself is a separate update.
        """
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid}, PUBLIC_PROJECTION)
        if doc is None:
            return None

        self.collection.update_one({"_id": oid}, {"$inc": {"profile_views": 1}})
        doc["profile_views"] = doc.get("profile_views", 0) + 1
        return serialize_doc(self._with_connections(doc))

    def update_profile(self, user_id, updates: dict) -> Optional[dict]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        updates = {**updates, "updated_at": utcnow()}
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": updates},
            projection=PRIVATE_PROJECTION,
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None
        return serialize_doc(self._with_connections(doc))

    def search(self, query: str, page: int, limit: int) -> Tuple[List[dict], Dict[str, int]]:
        """Case-insensitive substring match on name, any skill, or location."""
        pattern = {"$regex": re.escape(query), "$options": "i"}
        mongo_query = {
            "$or": [
                {"name": pattern},
                {"skills": pattern},
                {"location": pattern}
            ]
        }
        docs, pagination = find_page(
            self.collection,
            mongo_query,
            sort=[("profile_views", -1), ("_id", 1)],
            page=page,
            limit=limit,
            projection=SEARCH_PROJECTION
        )
        return serialize_docs(docs), pagination

    # ------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------

    @staticmethod
    def find_connection(user: dict, other_id: str, direction: Optional[str] = None) -> Optional[dict]:
        """First entry in a serialized user's connections that references ``other_id``."""
        for entry in user.get("connections", []):
            if not same_id(entry.get("user"), other_id):
                continue
            if direction is None or entry.get("direction") == direction:
                return entry
        return None

    def send_connection_request(self, requester_id: str, target_id: str) -> bool:
        """
        Record a pending request on both users.

        Returns False when the target already holds an entry for the
        requester. The check and the push are one conditional update.
        """
        requester = to_object_id(requester_id)
        target = to_object_id(target_id)
        now = utcnow()

        result = self.collection.update_one(
            {"_id": target, "connections.user": {"$ne": requester}},
            {
                "$push": {"connections": {
                    "user": requester,
                    "status": ConnectionStatus.pending.value,
                    "direction": ConnectionDirection.incoming.value,
                    "created_at": now
                }},
                "$set": {"updated_at": now}
            }
        )
        if result.modified_count == 0:
            return False

        self.collection.update_one(
            {"_id": requester, "connections.user": {"$ne": target}},
            {
                "$push": {"connections": {
                    "user": target,
                    "status": ConnectionStatus.pending.value,
                    "direction": ConnectionDirection.outgoing.value,
                    "created_at": now
                }},
                "$set": {"updated_at": now}
            }
        )
        logger.info("Connection requested: %s -> %s", requester_id, target_id)
        return True

    def set_connection_status(self, user_id: str, other_id: str, status: str) -> None:
        """Write ``status`` on both mirrored entries."""
        user = to_object_id(user_id)
        other = to_object_id(other_id)
        now = utcnow()
        update = {"$set": {
            "connections.$.status": status,
            "connections.$.responded_at": now,
            "updated_at": now
        }}
        self.collection.update_one({"_id": user, "connections.user": other}, update)
        self.collection.update_one({"_id": other, "connections.user": user}, update)
        logger.info("Connection %s <-> %s is now %s", user_id, other_id, status)

    def is_connected(self, user_id, other_id) -> bool:
        """True when ``user_id`` holds an accepted connection with ``other_id``."""
        user = to_object_id(user_id)
        other = to_object_id(other_id)
        if user is None or other is None:
            return False
        return self.collection.count_documents({
            "_id": user,
            "connections": {"$elemMatch": {
                "user": other,
                "status": ConnectionStatus.accepted.value
            }}
        }, limit=1) > 0

    def pending_requests(self, user_id) -> Dict[str, List[dict]]:
        """Pending entries split into requests received and requests sent."""
        user = self.get_private_profile(user_id)
        pending = [
            entry for entry in (user or {}).get("connections", [])
            if entry.get("status") == ConnectionStatus.pending.value
        ]
        return {
            "incoming": [e for e in pending if e.get("direction") == ConnectionDirection.incoming.value],
            "outgoing": [e for e in pending if e.get("direction") == ConnectionDirection.outgoing.value],
        }
