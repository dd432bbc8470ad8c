from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, Response, current_app, jsonify, request

from hiretrack.audit import compute_diff, get_recorder
from hiretrack.candidates.exporter import build_csv, export_filename
from hiretrack.candidates.importer import CandidateImporter, ImportOutcome
from hiretrack.db import get_store
from hiretrack.models import Invalid, validate_candidate_payload
from hiretrack.serializers import candidate_json, page_meta
from hiretrack.utils.auth import require_permission
from hiretrack.utils.errors import ApiError, not_found
from hiretrack.utils.validators import candidate_filters, parse_pagination, require_json

candidates_bp = Blueprint("candidates", __name__)

_IMPORT_STATUS = {
    ImportOutcome.SUCCESS: 200,
    ImportOutcome.PARTIAL: 207,
    ImportOutcome.FAILED: 400,
}


def _validation_error(result: Invalid) -> ApiError:
    return ApiError("VALIDATION_ERROR", result.message, status=400, details=result.errors)


@candidates_bp.get("")
@require_permission("read", "candidates")
def list_candidates():
    cfg = current_app.config["CFG"]
    page, limit = parse_pagination(request.args, default_limit=cfg.DEFAULT_PAGE_SIZE, max_limit=cfg.MAX_PAGE_SIZE)
    filters = candidate_filters(request.args)
    store = get_store()

    search = str(request.args.get("search") or "").strip()
    if search:
        found = store.search_candidates(search, filters)
        return jsonify(
            {
                "success": True,
                "data": {"candidates": [candidate_json(c) for c in found], **page_meta(len(found), 1, max(1, len(found)))},
            }
        )

    docs, total = store.list_candidates(filters, skip=(page - 1) * limit, limit=limit)
    return jsonify(
        {"success": True, "data": {"candidates": [candidate_json(c) for c in docs], **page_meta(total, page, limit)}}
    )


@candidates_bp.post("")
@require_permission("create", "candidates")
def create_candidate():
    cfg = current_app.config["CFG"]
    result = validate_candidate_payload(require_json(), app_timezone=cfg.APP_TIMEZONE)
    if isinstance(result, Invalid):
        raise _validation_error(result)

    data = result.value
    store = get_store()
    if store.find_candidate_by_email(data["email"]):
        raise ApiError("CONFLICT", "Candidate with this email already exists", status=409)

    candidate = store.create_candidate(data)
    get_recorder().record("candidate", str(candidate["_id"]), "created", {"candidate": data})
    return jsonify({"success": True, "data": candidate_json(candidate)}), 201


@candidates_bp.post("/import")
@require_permission("import", "candidates")
def import_candidates():
    upload = request.files.get("file")
    if upload is None:
        raise ApiError("BAD_REQUEST", "No file provided", status=400)

    cfg = current_app.config["CFG"]
    importer = CandidateImporter(get_store(), get_recorder(), app_timezone=cfg.APP_TIMEZONE)
    report = importer.run(filename=upload.filename, content_type=upload.mimetype, data=upload.read())

    body = {"success": report.outcome is not ImportOutcome.FAILED, **report.to_dict()}
    return jsonify(body), _IMPORT_STATUS[report.outcome]


@candidates_bp.get("/export")
@require_permission("export", "candidates")
def export_candidates():
    cfg = current_app.config["CFG"]
    docs, _total = get_store().list_candidates(candidate_filters(request.args), limit=cfg.EXPORT_MAX_ROWS)

    filename = export_filename(datetime.now(timezone.utc))
    return Response(
        build_csv(docs),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@candidates_bp.get("/<candidate_id>")
@require_permission("read", "candidates")
def get_candidate(candidate_id: str):
    candidate = get_store().get_candidate(candidate_id)
    if not candidate:
        raise not_found("Candidate")
    return jsonify({"success": True, "data": candidate_json(candidate)})


@candidates_bp.patch("/<candidate_id>")
@require_permission("update", "candidates")
def update_candidate(candidate_id: str):
    store = get_store()
    before = store.get_candidate(candidate_id)
    if not before:
        raise not_found("Candidate")

    cfg = current_app.config["CFG"]
    result = validate_candidate_payload(require_json(), partial=True, app_timezone=cfg.APP_TIMEZONE)
    if isinstance(result, Invalid):
        raise _validation_error(result)

    updates = result.value
    new_email = updates.get("email")
    if new_email and new_email != before.get("email"):
        other = store.find_candidate_by_email(new_email)
        if other and other["_id"] != before["_id"]:
            raise ApiError("CONFLICT", "Candidate with this email already exists", status=409)

    after = store.update_candidate(candidate_id, updates)
    if not after:
        raise not_found("Candidate")

    get_recorder().record("candidate", candidate_id, "updated", compute_diff(before, after))
    return jsonify({"success": True, "data": candidate_json(after)})


@candidates_bp.delete("/<candidate_id>")
@require_permission("delete", "candidates")
def delete_candidate(candidate_id: str):
    store = get_store()
    candidate = store.get_candidate(candidate_id)
    if not candidate:
        raise not_found("Candidate")

    if not store.soft_delete_candidate(candidate_id):
        raise not_found("Candidate")

    get_recorder().record("candidate", candidate_id, "deleted", {"candidate": candidate})
    return jsonify({"success": True, "data": {"message": "Candidate deleted successfully"}})
