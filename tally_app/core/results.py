"""Public results: merge official (latest round per unit) and live tallies."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass

from django.db import DatabaseError
from django.db.models import Count, OuterRef, Subquery, Sum

from core.models import Candidate, LiveTally, PollingUnit, TallyType, UnitSubmission, VoteResult
from core.system_config import get_system_config, public_view_enabled

logger = logging.getLogger(__name__)


def displayed_votes(*, official: int, live: int) -> int:
    """Official counts win once they are non-zero; live counts fill in before that.

    A genuine official zero is indistinguishable from "not yet submitted" and
    falls back to the live figure.
    """
    return official if official > 0 else live


@dataclass(frozen=True)
class CandidateTotals:
    candidate: Candidate
    official_votes: int
    live_votes: int

    @property
    def displayed_votes(self) -> int:
        return displayed_votes(official=self.official_votes, live=self.live_votes)


@dataclass(frozen=True)
class ResultsSummary:
    total_official_no_vote: int
    total_official_void: int
    total_live_no_vote: int
    total_live_void: int
    total_signatures: int
    total_ballots_issued: int
    total_eligible: int
    units_submitted: int
    total_units: int

    @property
    def turnout_percent(self) -> str:
        if self.total_eligible <= 0:
            return "0"
        return f"{self.total_signatures / self.total_eligible * 100:.1f}"

    @property
    def is_official(self) -> bool:
        return is_official(units_submitted=self.units_submitted, total_units=self.total_units)

    @property
    def displayed_no_vote(self) -> int:
        return displayed_votes(official=self.total_official_no_vote, live=self.total_live_no_vote)

    @property
    def displayed_void(self) -> int:
        return displayed_votes(official=self.total_official_void, live=self.total_live_void)


@dataclass(frozen=True)
class GradeBreakdown:
    grade: str
    votes: dict[int, int]


def is_official(*, units_submitted: int, total_units: int) -> bool:
    return total_units > 0 and units_submitted == total_units


def _latest_round_for_unit() -> Subquery:
    return Subquery(
        UnitSubmission.objects.filter(polling_unit_id=OuterRef("polling_unit_id"))
        .order_by("-round")
        .values("round")[:1]
    )


def latest_vote_results():
    return VoteResult.objects.filter(round=_latest_round_for_unit())


def latest_submissions():
    return UnitSubmission.objects.filter(round=_latest_round_for_unit())


def official_totals() -> dict[int, int]:
    """Sum each candidate's votes over every unit's latest round.

    Units without any submission contribute nothing.
    """
    rows = latest_vote_results().order_by().values("candidate_id").annotate(total=Sum("vote_count"))
    return {int(row["candidate_id"]): int(row["total"] or 0) for row in rows}


def official_totals_by_unit() -> dict[int, dict[int, int]]:
    by_unit: dict[int, dict[int, int]] = defaultdict(dict)
    for row in latest_vote_results().order_by().values("polling_unit_id", "candidate_id", "vote_count"):
        by_unit[int(row["polling_unit_id"])][int(row["candidate_id"])] = int(row["vote_count"])
    return dict(by_unit)


def live_totals() -> dict[int, int]:
    rows = (
        LiveTally.objects.filter(tally_type=TallyType.candidate, candidate__isnull=False)
        .order_by()
        .values("candidate_id")
        .annotate(total=Sum("count"))
    )
    return {int(row["candidate_id"]): int(row["total"] or 0) for row in rows}


def live_totals_by_unit() -> dict[int, dict[int, int]]:
    by_unit: dict[int, dict[int, int]] = defaultdict(dict)
    rows = (
        LiveTally.objects.filter(tally_type=TallyType.candidate, candidate__isnull=False)
        .order_by()
        .values("polling_unit_id", "candidate_id", "count")
    )
    for row in rows:
        unit_votes = by_unit[int(row["polling_unit_id"])]
        candidate_id = int(row["candidate_id"])
        unit_votes[candidate_id] = unit_votes.get(candidate_id, 0) + int(row["count"])
    return dict(by_unit)


def candidate_totals() -> list[CandidateTotals]:
    official = official_totals()
    live = live_totals()
    return [
        CandidateTotals(
            candidate=candidate,
            official_votes=official.get(candidate.id, 0),
            live_votes=live.get(candidate.id, 0),
        )
        for candidate in Candidate.objects.order_by("number", "id")
    ]


def results_summary() -> ResultsSummary:
    official = latest_submissions().aggregate(
        no_vote=Sum("total_no_vote"),
        void=Sum("total_void_ballots"),
        signatures=Sum("total_signatures"),
        ballots_issued=Sum("ballots_issued"),
        units=Count("polling_unit_id", distinct=True),
    )

    live_by_type: dict[str, int] = {
        str(row["tally_type"]): int(row["total"] or 0)
        for row in LiveTally.objects.filter(tally_type__in=[TallyType.no_vote, TallyType.void])
        .order_by()
        .values("tally_type")
        .annotate(total=Sum("count"))
    }

    units = PollingUnit.objects.aggregate(total=Count("id"), eligible=Sum("total_eligible"))

    return ResultsSummary(
        total_official_no_vote=int(official["no_vote"] or 0),
        total_official_void=int(official["void"] or 0),
        total_live_no_vote=live_by_type.get(TallyType.no_vote, 0),
        total_live_void=live_by_type.get(TallyType.void, 0),
        total_signatures=int(official["signatures"] or 0),
        total_ballots_issued=int(official["ballots_issued"] or 0),
        total_eligible=int(units["eligible"] or 0),
        units_submitted=int(official["units"] or 0),
        total_units=int(units["total"] or 0),
    )


def grade_breakdown() -> list[GradeBreakdown]:
    """Per-grade candidate totals, choosing official-or-live per unit.

    A unit that has submitted contributes its latest official round; a unit
    that has not contributes its own live tally. This differs from the global
    totals, which apply the fallback per candidate across all units.
    """
    candidate_ids = list(Candidate.objects.order_by("number", "id").values_list("id", flat=True))
    submitted_unit_ids = set(UnitSubmission.objects.values_list("polling_unit_id", flat=True).distinct())
    official_by_unit = official_totals_by_unit()
    live_by_unit = live_totals_by_unit()

    units_by_grade: dict[str, list[int]] = defaultdict(list)
    for unit_id, grade in PollingUnit.objects.order_by("grade", "name", "id").values_list("id", "grade"):
        units_by_grade[str(grade)].append(int(unit_id))

    breakdown: list[GradeBreakdown] = []
    for grade in sorted(units_by_grade):
        votes = dict.fromkeys(candidate_ids, 0)
        for unit_id in units_by_grade[grade]:
            if unit_id in submitted_unit_ids:
                source = official_by_unit.get(unit_id, {})
            else:
                source = live_by_unit.get(unit_id, {})
            for candidate_id in candidate_ids:
                votes[candidate_id] += source.get(candidate_id, 0)
        breakdown.append(GradeBreakdown(grade=grade, votes=votes))
    return breakdown


def _candidate_result_payload(totals: CandidateTotals) -> dict[str, object]:
    candidate = totals.candidate
    return {
        "candidateId": candidate.id,
        "candidateNumber": candidate.number,
        "candidateName": candidate.name,
        "partyName": candidate.party_name,
        "photoUrl": candidate.photo_url or None,
        "themeColor": candidate.theme_color,
        "officialVotes": totals.official_votes,
        "liveVotes": totals.live_votes,
        "displayedVotes": totals.displayed_votes,
    }


def _summary_payload(summary: ResultsSummary) -> dict[str, object]:
    return {
        "totalOfficialNoVote": summary.total_official_no_vote,
        "totalOfficialVoid": summary.total_official_void,
        "totalLiveNoVote": summary.total_live_no_vote,
        "totalLiveVoid": summary.total_live_void,
        "displayedNoVote": summary.displayed_no_vote,
        "displayedVoid": summary.displayed_void,
        "totalSignatures": summary.total_signatures,
        "totalBallotsIssued": summary.total_ballots_issued,
        "totalEligible": summary.total_eligible,
        "unitsSubmitted": summary.units_submitted,
        "totalUnits": summary.total_units,
        "turnoutPercent": summary.turnout_percent,
        "isOfficial": summary.is_official,
    }


def build_public_results() -> dict[str, object]:
    config = get_system_config()
    if not config.public_view_enabled:
        return {"enabled": False}

    return {
        "enabled": True,
        "config": {
            "electionTitle": config.election_title,
            "schoolName": config.school_name,
        },
        "candidates": [_candidate_result_payload(totals) for totals in candidate_totals()],
        "summary": _summary_payload(results_summary()),
    }


def build_chart_data() -> dict[str, object]:
    """Grade-grouped chart data; degrades to an empty chart on store errors."""
    try:
        if not public_view_enabled():
            return {"enabled": False}

        candidates = list(Candidate.objects.order_by("number", "id"))
        breakdown = grade_breakdown()
    except DatabaseError:
        logger.exception("Chart data aggregation failed; serving an empty chart")
        return {"enabled": True, "degraded": True, "chartData": [], "candidates": []}

    chart_data: list[dict[str, object]] = []
    for row in breakdown:
        point: dict[str, object] = {"grade": row.grade}
        for candidate in candidates:
            point[f"candidate_{candidate.id}"] = row.votes.get(candidate.id, 0)
            point[f"candidate_{candidate.id}_name"] = f"No. {candidate.number} {candidate.name}"
            point[f"candidate_{candidate.id}_color"] = candidate.theme_color
        chart_data.append(point)

    return {
        "enabled": True,
        "chartData": chart_data,
        "candidates": [
            {
                "id": c.id,
                "number": c.number,
                "name": c.name,
                "partyName": c.party_name,
                "themeColor": c.theme_color,
                "photoUrl": c.photo_url or None,
            }
            for c in candidates
        ],
    }
