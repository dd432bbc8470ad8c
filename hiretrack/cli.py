"""Offline candidate import/export against the configured database.

    python -m hiretrack.cli import candidates.csv --as recruiter@example.com
    python -m hiretrack.cli export out.csv --status INTERVIEW

Imports run without a request, so the ``imported`` audit event is only written
when ``--as`` names an existing active user.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Optional

from hiretrack import create_app
from hiretrack.audit import AuditRecorder
from hiretrack.candidates.exporter import build_csv
from hiretrack.candidates.importer import CandidateImporter, ImportOutcome
from hiretrack.utils.errors import ApiError

EXIT_CODES = {ImportOutcome.SUCCESS: 0, ImportOutcome.PARTIAL: 2, ImportOutcome.FAILED: 1}


def _actor_for(store, email: Optional[str]) -> Optional[dict[str, Any]]:
    if not email:
        return None
    user = store.get_user_by_email(email.strip().lower())
    if not user or user.get("deactivatedAt"):
        raise SystemExit(f"No active user with email {email}")
    return {"id": str(user["_id"]), "name": str(user.get("name") or user["email"])}


def _run_import(app, args: argparse.Namespace) -> int:
    store = app.extensions["store"]
    actor = _actor_for(store, args.actor_email)
    importer = CandidateImporter(
        store,
        AuditRecorder(store, actor_resolver=lambda: actor),
        app_timezone=app.config["CFG"].APP_TIMEZONE,
    )

    try:
        with open(args.path, "rb") as f:
            data = f.read()
    except OSError as e:
        print(f"Cannot read {args.path}: {e.strerror or e}", file=sys.stderr)
        return 1

    try:
        report = importer.run(filename=os.path.basename(args.path), content_type=None, data=data)
    except ApiError as e:
        print(f"{e.code}: {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(report.to_dict() if args.verbose else {"message": report.message, "summary": report.summary()}, indent=2))
    return EXIT_CODES[report.outcome]


def _run_export(app, args: argparse.Namespace) -> int:
    filters = {k: v for k, v in {"status": args.status, "level": args.level}.items() if v}
    docs, total = app.extensions["store"].list_candidates(filters, limit=app.config["CFG"].EXPORT_MAX_ROWS)
    try:
        with open(args.path, "w", encoding="utf-8", newline="") as f:
            f.write(build_csv(docs))
    except OSError as e:
        print(f"Cannot write {args.path}: {e.strerror or e}", file=sys.stderr)
        return 1
    print(f"Exported {len(docs)} of {total} candidates to {args.path}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Import or export hiring candidates as CSV.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Import candidates from a CSV file")
    p_import.add_argument("path")
    p_import.add_argument("--as", dest="actor_email", default=None, help="Email of the user to record as the actor")
    p_import.add_argument("--verbose", action="store_true", help="Print every row result")

    p_export = sub.add_parser("export", help="Export candidates to a CSV file")
    p_export.add_argument("path")
    p_export.add_argument("--status", default=None)
    p_export.add_argument("--level", default=None)

    args = parser.parse_args(argv)
    app = create_app()
    if args.command == "import":
        return _run_import(app, args)
    return _run_export(app, args)


if __name__ == "__main__":
    sys.exit(main())
