"""
Post Service - social posts with embedded likes and comments.
"""

import logging
from typing import Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo.collection import Collection

from talentlink.db.mongodb import get_collection, COLLECTIONS
from talentlink.schemas.schemas import PostVisibility
from talentlink.services.mongo_service import (
    find_page,
    load_user_summaries,
    populate_entries,
    serialize_doc,
    to_object_id,
    user_summary,
    utcnow,
)

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1)]


class PostService:
    """
    Handles the posts collection.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["posts"])

    def _populate(self, docs: List[dict]) -> List[dict]:
        """Attach author and commenter summaries."""
        user_ids = []
        for doc in docs:
            user_ids.append(doc.get("author"))
            user_ids.extend(comment.get("user") for comment in doc.get("comments", []))
        summaries = load_user_summaries(user_ids)

        populated = []
        for doc in docs:
            doc = dict(doc)
            doc["author"] = user_summary(doc.get("author"), summaries)
            doc["comments"] = populate_entries(doc.get("comments", []), summaries)
            populated.append(serialize_doc(doc))
        return populated

    def create(self, author_id: str, content: str, image: Optional[str] = None,
               visibility: str = PostVisibility.public.value) -> dict:
        now = utcnow()
        doc = {
            "author": to_object_id(author_id),
            "content": content,
            "image": image,
            "visibility": visibility,
            "likes": [],
            "comments": [],
            "created_at": now,
            "updated_at": now
        }
        result = self.collection.insert_one(doc)
        logger.info("Post created: %s by %s", result.inserted_id, author_id)
        doc["_id"] = result.inserted_id
        return self._populate([doc])[0]

    def get_raw(self, post_id) -> Optional[dict]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def list_public(self, page: int, limit: int) -> Tuple[List[dict], Dict[str, int]]:
        """The feed: public posts, newest first."""
        query = {"visibility": PostVisibility.public.value}
        docs, pagination = find_page(self.collection, query, NEWEST_FIRST, page, limit)
        return self._populate(docs), pagination

    def list_by_author(self, author_id, visibilities: Optional[List[str]], page: int,
                       limit: int) -> Tuple[List[dict], Dict[str, int]]:
        """Author's posts. ``visibilities=None`` means no visibility restriction."""
        query = {"author": to_object_id(author_id)}
        if visibilities is not None:
            query["visibility"] = {"$in": visibilities}
        docs, pagination = find_page(self.collection, query, NEWEST_FIRST, page, limit)
        return self._populate(docs), pagination

    def toggle_like(self, post: dict, user_id) -> Tuple[bool, int]:
        """
        Like if the user has not liked the post yet, unlike otherwise.

        Returns (liked, like_count).
        """
        user = to_object_id(user_id)
        already_liked = any(like.get("user") == user for like in post.get("likes", []))

        if already_liked:
            self.collection.update_one(
                {"_id": post["_id"]},
                {"$pull": {"likes": {"user": user}}}
            )
        else:
            self.collection.update_one(
                {"_id": post["_id"], "likes.user": {"$ne": user}},
                {"$push": {"likes": {"user": user, "created_at": utcnow()}}}
            )

        refreshed = self.collection.find_one({"_id": post["_id"]}, {"likes": 1})
        return not already_liked, len(refreshed.get("likes", []))

    def add_comment(self, post: dict, user_id, content: str) -> Tuple[dict, int]:
        """Append a comment. Returns (populated comment, comment_count)."""
        user = to_object_id(user_id)
        comment = {
            "_id": ObjectId(),
            "user": user,
            "content": content,
            "created_at": utcnow()
        }
        self.collection.update_one(
            {"_id": post["_id"]},
            {"$push": {"comments": comment}, "$set": {"updated_at": comment["created_at"]}}
        )
        refreshed = self.collection.find_one({"_id": post["_id"]}, {"comments": 1})

        summaries = load_user_summaries([user])
        populated = serialize_doc(populate_entries([comment], summaries)[0])
        return populated, len(refreshed.get("comments", []))
