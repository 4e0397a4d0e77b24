from tablib import Dataset

from core.results import candidate_totals, results_summary

RESULTS_EXPORT_HEADERS: tuple[str, ...] = (
    "number",
    "name",
    "party",
    "official_votes",
    "live_votes",
    "displayed_votes",
)


def build_results_dataset() -> Dataset:
    """Candidate results as a tablib Dataset (one row per candidate)."""
    summary = results_summary()
    dataset = Dataset(headers=list(RESULTS_EXPORT_HEADERS), title="results")
    for totals in candidate_totals():
        dataset.append(
            (
                totals.candidate.number,
                totals.candidate.name,
                totals.candidate.party_name,
                totals.official_votes,
                totals.live_votes,
                totals.displayed_votes,
            )
        )

    # No-vote and void rows follow the candidates with a blank number.
    dataset.append(("", "No vote", "", summary.total_official_no_vote, summary.total_live_no_vote, summary.displayed_no_vote))
    dataset.append(("", "Void", "", summary.total_official_void, summary.total_live_void, summary.displayed_void))
    return dataset
