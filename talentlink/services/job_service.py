"""
Job Service - job postings and their embedded applications.

A job document:
{
    "title", "company", "location", "type", "salary",
    "description", "requirements", "skills": [...],
    "posted_by": ObjectId(user),
    "applications": [
        {"user": ObjectId, "status": "pending", "applied_at", "cover_letter"}
    ],
    "status": "active" | "closed" | "draft",
    "views": 0, "featured": False,
    "expires_at", "created_at", "updated_at"
}
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from pymongo import ReturnDocument
from pymongo.collection import Collection

from talentlink.core.config import get_settings
from talentlink.db.mongodb import get_collection, COLLECTIONS
from talentlink.schemas.schemas import ApplicationStatus, JobStatus
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

settings = get_settings()

# Featured first, then newest
LISTING_SORT = [("featured", -1), ("created_at", -1)]


def build_listing_query(
    job_type: Optional[str] = None,
    location: Optional[str] = None,
    search: Optional[str] = None,
    now: Optional[datetime] = None
) -> dict:
    """
    Filter for the public job board.

    Always limited to active, unexpired jobs. ``location`` is a
    case-insensitive substring match, ``search`` uses the text index.
    """
    query = {
        "status": JobStatus.active.value,
        "expires_at": {"$gt": now or utcnow()}
    }
    if job_type:
        query["type"] = job_type
    if location:
        query["location"] = {"$regex": re.escape(location), "$options": "i"}
    if search:
        query["$text"] = {"$search": search}
    return query


class JobService:
    """
    Handles the jobs collection.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["jobs"])

    # ------------------------------------------------------------
    # Population
    # ------------------------------------------------------------

    def _populate(self, docs: List[dict], with_applications: bool) -> List[dict]:
        """Attach poster summaries (and applicant summaries when requested)."""
        user_ids = [doc.get("posted_by") for doc in docs]
        if with_applications:
            for doc in docs:
                user_ids.extend(app.get("user") for app in doc.get("applications", []))
        summaries = load_user_summaries(user_ids)

        populated = []
        for doc in docs:
            doc = dict(doc)
            doc["posted_by"] = user_summary(doc.get("posted_by"), summaries)
            if with_applications:
                doc["applications"] = populate_entries(doc.get("applications", []), summaries)
            else:
                doc["applications"] = []
            populated.append(serialize_doc(doc))
        return populated

    def populate(self, doc: dict, with_applications: bool = False) -> dict:
        return self._populate([doc], with_applications)[0]

    # ------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------

    def create(self, data: dict, posted_by: str) -> dict:
        """
        Insert a job posted by ``posted_by``.

        New jobs are active, unfeatured, unviewed and expire after
        ``job_expiry_days``.
        """
        now = utcnow()
        doc = {
            **data,
            "posted_by": to_object_id(posted_by),
            "applications": [],
            "status": JobStatus.active.value,
            "views": 0,
            "featured": False,
            "expires_at": now + timedelta(days=settings.job_expiry_days),
            "created_at": now,
            "updated_at": now
        }
        result = self.collection.insert_one(doc)
        logger.info("Job created: %s by %s", result.inserted_id, posted_by)
        return self.populate(self.get_raw(result.inserted_id))

    def get_raw(self, job_id) -> Optional[dict]:
        """Unserialized job document (ObjectIds intact), or None."""
        oid = to_object_id(job_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def count_view(self, job_id) -> None:
        self.collection.update_one({"_id": to_object_id(job_id)}, {"$inc": {"views": 1}})

    def update(self, job_id, updates: dict) -> Optional[dict]:
        updates = {**updates, "updated_at": utcnow()}
        doc = self.collection.find_one_and_update(
            {"_id": to_object_id(job_id)},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None
        return self.populate(doc, with_applications=True)

    def list_active(
        self,
        page: int,
        limit: int,
        job_type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None
    ) -> Tuple[List[dict], Dict[str, int]]:
        query = build_listing_query(job_type, location, search)
        docs, pagination = find_page(
            self.collection, query, LISTING_SORT, page, limit,
            projection={"applications": 0}
        )
        return self._populate(docs, with_applications=False), pagination

    def list_by_poster(self, user_id, page: int, limit: int) -> Tuple[List[dict], Dict[str, int]]:
        query = {"posted_by": to_object_id(user_id)}
        docs, pagination = find_page(self.collection, query, [("created_at", -1)], page, limit)
        return self._populate(docs, with_applications=True), pagination

    # ------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------

    @staticmethod
    def find_application(job: dict, user_id) -> Optional[dict]:
        """First application on a raw job document made by ``user_id``."""
        oid = to_object_id(user_id)
        for application in job.get("applications", []):
            if application.get("user") == oid:
                return application
        return None

    def add_application(self, job_id, user_id, cover_letter: str = "") -> bool:
        """
        Append a pending application.

        Returns False when the user already has one on this job. The check
        and the push are one conditional update, so concurrent duplicates
        cannot both land.
        """
        user = to_object_id(user_id)
        now = utcnow()
        result = self.collection.update_one(
            {"_id": to_object_id(job_id), "applications.user": {"$ne": user}},
            {
                "$push": {"applications": {
                    "user": user,
                    "status": ApplicationStatus.pending.value,
                    "applied_at": now,
                    "cover_letter": cover_letter or ""
                }},
                "$set": {"updated_at": now}
            }
        )
        if result.modified_count == 0:
            return False
        logger.info("Application submitted: job=%s user=%s", job_id, user_id)
        return True

    def set_application_status(self, job_id, user_id, status: str) -> Optional[dict]:
        """Update one application's status; returns the populated application."""
        user = to_object_id(user_id)
        now = utcnow()
        doc = self.collection.find_one_and_update(
            {"_id": to_object_id(job_id), "applications.user": user},
            {"$set": {
                "applications.$.status": status,
                "applications.$.updated_at": now,
                "updated_at": now
            }},
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None
        logger.info("Application status: job=%s user=%s -> %s", job_id, user_id, status)
        application = self.find_application(doc, user)
        summaries = load_user_summaries([user])
        return serialize_doc(populate_entries([application], summaries)[0])
