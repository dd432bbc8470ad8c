from __future__ import annotations

from typing import Any

from hiretrack.models import CandidateStatus


def _pct(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


def summary_report(store) -> dict[str, Any]:
    counts = store.count_candidates_by_status()
    total = sum(counts.values())

    applied = counts[CandidateStatus.APPLIED.value]
    screening = counts[CandidateStatus.SCREENING.value]
    interview = counts[CandidateStatus.INTERVIEW.value]
    passed = counts[CandidateStatus.PASSED.value]
    offer = counts[CandidateStatus.OFFER.value]
    rejected = counts[CandidateStatus.REJECTED.value]

    progressed_to_interview = interview + passed + offer

    return {
        "totalCandidates": total,
        "statusBreakdown": {
            "applied": applied,
            "screening": screening,
            "interview": interview,
            "passed": passed,
            "offer": offer,
            "rejected": rejected,
        },
        "conversionRates": {
            "applicationToScreening": _pct(total - applied, total),
            "screeningToInterview": _pct(progressed_to_interview, screening + progressed_to_interview),
            "interviewToPass": _pct(passed, interview + passed + rejected),
            "overallPassRate": _pct(passed + offer, total),
        },
        "pipeline": {
            "inProgress": applied + screening + interview,
            "completed": passed + offer + rejected,
            "pending": applied + screening,
        },
    }
