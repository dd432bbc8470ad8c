from __future__ import annotations

import re
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from hiretrack.models import CandidateStatus
from hiretrack.utils.datetime import utc_now

# Newest first; ObjectId breaks ties between entries written in the same millisecond.
NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]

SEARCH_LIMIT = 50


def parse_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value or ""))
    except (InvalidId, TypeError):
        return None


class MongoStore:
    """All reads and writes against the hiring database go through this class.

    Collections: ``candidates``, ``notes``, ``audit``, ``users``. Candidate
    queries only ever see rows whose ``deletedAt`` is null.
    """

    def __init__(self, db) -> None:
        self.db = db

    def ensure_indexes(self) -> None:
        self.db.users.create_index([("email", ASCENDING)], unique=True, name="users_email_unique")
        self.db.users.create_index([("authId", ASCENDING)], name="users_authId")
        self.db.candidates.create_index([("email", ASCENDING), ("deletedAt", ASCENDING)], name="candidates_email_deletedAt")
        self.db.candidates.create_index([("createdAt", DESCENDING)], name="candidates_createdAt_desc")
        self.db.candidates.create_index([("status", ASCENDING)], name="candidates_status")
        self.db.notes.create_index([("candidateId", ASCENDING), ("createdAt", DESCENDING)], name="notes_candidate_createdAt")
        self.db.audit.create_index(
            [("entityId", ASCENDING), ("entityType", ASCENDING), ("createdAt", DESCENDING)],
            name="audit_entity_createdAt",
        )
        self.db.audit.create_index([("actorId", ASCENDING), ("createdAt", DESCENDING)], name="audit_actor_createdAt")

    # candidates

    def find_candidate_by_email(self, email: str) -> Optional[dict[str, Any]]:
        return self.db.candidates.find_one({"email": email, "deletedAt": None})

    def get_candidate(self, candidate_id: Any) -> Optional[dict[str, Any]]:
        oid = parse_object_id(candidate_id)
        if oid is None:
            return None
        return self.db.candidates.find_one({"_id": oid, "deletedAt": None})

    def list_candidates(
        self, filters: dict[str, Any], *, skip: int = 0, limit: int = 50
    ) -> tuple[list[dict[str, Any]], int]:
        query = {"deletedAt": None, **filters}
        cursor = self.db.candidates.find(query).sort(NEWEST_FIRST).skip(skip).limit(limit)
        return list(cursor), self.db.candidates.count_documents(query)

    def search_candidates(self, term: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        pattern = {"$regex": re.escape(term), "$options": "i"}
        query = {
            "deletedAt": None,
            **filters,
            "$or": [
                {"name": pattern},
                {"email": pattern},
                {"professionalExperience": pattern},
                {"role": pattern},
            ],
        }
        return list(self.db.candidates.find(query).sort(NEWEST_FIRST).limit(SEARCH_LIMIT))

    def create_candidate(self, doc: dict[str, Any]) -> dict[str, Any]:
        now = utc_now()
        new_doc = {**doc, "createdAt": now, "updatedAt": now, "deletedAt": None}
        result = self.db.candidates.insert_one(new_doc)
        new_doc["_id"] = result.inserted_id
        return new_doc

    def bulk_create_candidates(self, docs: list[dict[str, Any]]) -> list[ObjectId]:
        """Insert every document in one ``insert_many`` call."""
        if not docs:
            return []
        now = utc_now()
        prepared = [{**d, "createdAt": now, "updatedAt": now, "deletedAt": None} for d in docs]
        result = self.db.candidates.insert_many(prepared, ordered=True)
        return list(result.inserted_ids)

    def update_candidate(self, candidate_id: Any, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
        oid = parse_object_id(candidate_id)
        if oid is None:
            return None
        return self.db.candidates.find_one_and_update(
            {"_id": oid, "deletedAt": None},
            {"$set": {**updates, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )

    def soft_delete_candidate(self, candidate_id: Any) -> bool:
        oid = parse_object_id(candidate_id)
        if oid is None:
            return False
        now = utc_now()
        result = self.db.candidates.update_one(
            {"_id": oid, "deletedAt": None}, {"$set": {"deletedAt": now, "updatedAt": now}}
        )
        return result.matched_count > 0

    def count_candidates_by_status(self) -> dict[str, int]:
        pipe = [
            {"$match": {"deletedAt": None}},
            {"$group": {"_id": "$status", "count": {"$sum": 1}}},
        ]
        counts = {s.value: 0 for s in CandidateStatus}
        for row in self.db.candidates.aggregate(pipe):
            counts[str(row["_id"] or CandidateStatus.APPLIED.value)] = int(row["count"])
        return counts

    # notes

    def create_note(self, doc: dict[str, Any]) -> dict[str, Any]:
        new_doc = {**doc, "createdAt": utc_now()}
        result = self.db.notes.insert_one(new_doc)
        new_doc["_id"] = result.inserted_id
        return new_doc

    def list_notes(self, candidate_id: str) -> list[dict[str, Any]]:
        return list(self.db.notes.find({"candidateId": candidate_id}).sort(NEWEST_FIRST))

    def get_note(self, note_id: Any) -> Optional[dict[str, Any]]:
        oid = parse_object_id(note_id)
        if oid is None:
            return None
        return self.db.notes.find_one({"_id": oid})

    def delete_note(self, note_id: Any) -> bool:
        oid = parse_object_id(note_id)
        if oid is None:
            return False
        return self.db.notes.delete_one({"_id": oid}).deleted_count > 0

    # audit

    def insert_audit(self, entry: dict[str, Any]) -> ObjectId:
        return self.db.audit.insert_one({**entry, "createdAt": utc_now()}).inserted_id

    def audit_for_entity(self, entity_id: str, entity_type: str) -> list[dict[str, Any]]:
        return list(self.db.audit.find({"entityId": entity_id, "entityType": entity_type}).sort(NEWEST_FIRST))

    def audit_by_actor(self, actor_id: str) -> list[dict[str, Any]]:
        return list(self.db.audit.find({"actorId": actor_id}).sort(NEWEST_FIRST))

    # users

    def count_users(self) -> int:
        return self.db.users.count_documents({})

    def create_user(self, doc: dict[str, Any]) -> dict[str, Any]:
        now = utc_now()
        new_doc = {**doc, "createdAt": now, "updatedAt": now}
        result = self.db.users.insert_one(new_doc)
        new_doc["_id"] = result.inserted_id
        return new_doc

    def get_user(self, user_id: Any) -> Optional[dict[str, Any]]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        return self.db.users.find_one({"_id": oid})

    def get_user_by_email(self, email: str) -> Optional[dict[str, Any]]:
        return self.db.users.find_one({"email": email})

    def get_user_by_auth_id(self, auth_id: str) -> Optional[dict[str, Any]]:
        return self.db.users.find_one({"authId": auth_id})

    def list_users(
        self,
        *,
        search: Optional[str] = None,
        role: Optional[str] = None,
        status: str = "all",
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        query: dict[str, Any] = {}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"email": pattern}]
        if role and role != "all":
            query["role"] = role
        if status == "active":
            query["deactivatedAt"] = {"$exists": False}
        elif status == "inactive":
            query["deactivatedAt"] = {"$exists": True}

        cursor = self.db.users.find(query).sort(NEWEST_FIRST).skip(skip).limit(limit)
        return list(cursor), self.db.users.count_documents(query)

    def update_user(self, user_id: Any, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        return self.db.users.find_one_and_update(
            {"_id": oid},
            {"$set": {**updates, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )

    def deactivate_user(self, user_id: Any) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        now = utc_now()
        result = self.db.users.update_one(
            {"_id": oid, "deactivatedAt": {"$exists": False}},
            {"$set": {"deactivatedAt": now, "updatedAt": now}},
        )
        return result.modified_count > 0

    def reactivate_user(self, user_id: Any) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        result = self.db.users.update_one(
            {"_id": oid, "deactivatedAt": {"$exists": True}},
            {"$unset": {"deactivatedAt": ""}, "$set": {"updatedAt": utc_now()}},
        )
        return result.modified_count > 0

    def touch_last_login(self, user_id: ObjectId) -> None:
        self.db.users.update_one({"_id": user_id}, {"$set": {"lastLoginAt": utc_now()}})

    def user_stats(self) -> dict[str, Any]:
        total = self.db.users.count_documents({})
        active = self.db.users.count_documents({"deactivatedAt": {"$exists": False}})
        pipe = [
            {"$match": {"deactivatedAt": {"$exists": False}}},
            {"$group": {"_id": "$role", "count": {"$sum": 1}}},
            {"$sort": {"_id": 1}},
        ]
        distribution = [{"role": r["_id"], "count": int(r["count"])} for r in self.db.users.aggregate(pipe)]
        return {
            "totalUsers": total,
            "activeUsers": active,
            "inactiveUsers": total - active,
            "roleDistribution": distribution,
        }
