from __future__ import annotations

from flask import Blueprint, jsonify

from hiretrack.audit import get_recorder
from hiretrack.db import get_store
from hiretrack.models import Invalid, validate_note_payload
from hiretrack.serializers import to_jsonable
from hiretrack.utils.auth import get_current_user, require_permission
from hiretrack.utils.errors import ApiError, not_found
from hiretrack.utils.validators import require_json

notes_bp = Blueprint("notes", __name__)


@notes_bp.get("/candidates/<candidate_id>/notes")
@require_permission("read", "notes")
def list_notes(candidate_id: str):
    notes = get_store().list_notes(candidate_id)
    return jsonify({"success": True, "data": to_jsonable(notes)})


@notes_bp.post("/candidates/<candidate_id>/notes")
@require_permission("create", "notes")
def add_note(candidate_id: str):
    store = get_store()
    if not store.get_candidate(candidate_id):
        raise not_found("Candidate")

    result = validate_note_payload(require_json())
    if isinstance(result, Invalid):
        raise ApiError("VALIDATION_ERROR", result.message, status=400, details=result.errors)

    author = get_current_user()
    note = {
        "candidateId": candidate_id,
        "authorId": author["id"],
        "authorName": author["name"] or author["email"],
        "body": result.value,
    }
    created = store.create_note(note)
    get_recorder().record("candidate", candidate_id, "note_added", {"note": note})
    return jsonify({"success": True, "data": to_jsonable(created)}), 201


@notes_bp.delete("/notes/<note_id>")
@require_permission("delete", "notes")
def delete_note(note_id: str):
    store = get_store()
    note = store.get_note(note_id)
    if not note:
        raise not_found("Note")

    if not store.delete_note(note_id):
        raise not_found("Note")

    get_recorder().record("candidate", str(note.get("candidateId") or ""), "note_deleted", {"note": note})
    return jsonify({"success": True, "data": {"message": "Note deleted successfully"}})
