"""Field-level change sets and the append-only audit trail.

Audit writes are best effort. ``AuditRecorder.record`` never raises: a missing
actor means a system action and nothing is written, and any storage failure is
logged and reported through the return value only. Callers run their mutation
first and record afterwards, so the mutation's outcome never depends on the
audit trail.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from flask import current_app, g, has_request_context

logger = logging.getLogger("hiretrack.audit")

Actor = Mapping[str, Any]
ActorResolver = Callable[[], Optional[Actor]]

_MISSING = object()


class AuditStore(Protocol):
    def insert_audit(self, entry: dict[str, Any]) -> Any: ...


def compute_diff(before: Optional[Mapping[str, Any]], after: Optional[Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
    """Changed keys only, as ``{key: {"before": old, "after": new}}``.

    Keys are the union of both sides. A key present on only one side is always
    a change, reported with None for the missing side. Nested values are
    compared with ``!=`` as a whole, not diffed recursively.
    """
    before = before or {}
    after = after or {}
    diff: dict[str, dict[str, Any]] = {}
    keys = list(before.keys()) + [k for k in after.keys() if k not in before]
    for key in keys:
        old = before.get(key, _MISSING)
        new = after.get(key, _MISSING)
        if old is _MISSING or new is _MISSING or old != new:
            diff[key] = {
                "before": None if old is _MISSING else old,
                "after": None if new is _MISSING else new,
            }
    return diff


def current_actor() -> Optional[Actor]:
    """The authenticated user of the current request, if any."""
    if not has_request_context():
        return None
    return g.get("current_user")


class AuditRecorder:
    def __init__(self, store: AuditStore, actor_resolver: ActorResolver = current_actor) -> None:
        self._store = store
        self._actor_resolver = actor_resolver

    def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        diff: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        try:
            actor = self._actor_resolver()
            if not actor:
                logger.debug("audit skipped, no actor: %s %s %s", entity_type, entity_id, action)
                return False

            entry: dict[str, Any] = {
                "entityType": str(entity_type),
                "entityId": str(entity_id),
                "action": str(action),
                "actorId": str(actor.get("id") or ""),
                "actorName": str(actor.get("name") or actor.get("email") or ""),
            }
            if diff is not None:
                entry["diff"] = dict(diff)
            self._store.insert_audit(entry)
            return True
        except Exception:
            logger.warning(
                "Failed to log audit event entity_type=%s entity_id=%s action=%s",
                entity_type,
                entity_id,
                action,
                exc_info=True,
            )
            return False


def get_recorder() -> AuditRecorder:
    return current_app.extensions["audit"]
