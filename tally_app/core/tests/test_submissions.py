from __future__ import annotations

from unittest.mock import patch

from django.db import IntegrityError, OperationalError
from django.test import TestCase

from core.models import MAX_COUNT, AuditLog, UnitSubmission, VoteResult
from core.submissions import parse_vote_lines, submission_status, submit_official_result
from core.tally_errors import (
    BalanceError,
    ConflictError,
    MissingReasonError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from core.tests.utils_test_data import create_candidates, create_unit


class SubmitOfficialResultTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.cand_a, self.cand_b = create_candidates(2)
        self.unit = create_unit("Room 101")

    def _submit(self, a: int, b: int, *, signatures: int, reason: str = "", **extra):
        return submit_official_result(
            polling_unit_id=self.unit.id,
            total_signatures=signatures,
            votes=[
                {"candidateId": self.cand_a.id, "voteCount": a},
                {"candidateId": self.cand_b.id, "voteCount": b},
            ],
            submitted_by="staff1",
            reason=reason,
            **extra,
        )

    def test_first_submission_is_round_one_without_reason(self) -> None:
        receipt = self._submit(6, 4, signatures=10)

        self.assertEqual(receipt.round, 1)
        self.assertFalse(receipt.is_recount)
        self.assertEqual(len(receipt.vote_results), 2)
        self.assertEqual(receipt.submission.reason, "")

        entry = AuditLog.objects.get()
        self.assertEqual(entry.action, AuditLog.Action.submit)
        self.assertEqual(entry.polling_unit, "Room 101")
        self.assertEqual(entry.round, 1)
        self.assertIsNone(entry.reason)
        self.assertIn("signatures 10", entry.details)

    def test_round_one_ignores_a_supplied_reason(self) -> None:
        receipt = self._submit(6, 4, signatures=10, reason="not needed")

        self.assertEqual(receipt.round, 1)
        self.assertEqual(receipt.submission.reason, "")
        self.assertIsNone(AuditLog.objects.get().reason)

    def test_recount_creates_next_round_and_keeps_history(self) -> None:
        self._submit(6, 4, signatures=10)
        receipt = self._submit(7, 3, signatures=10, reason="recount")

        self.assertEqual(receipt.round, 2)
        self.assertTrue(receipt.is_recount)
        self.assertEqual(receipt.submission.reason, "recount")
        self.assertEqual(
            list(UnitSubmission.objects.filter(polling_unit=self.unit).order_by("round").values_list("round", flat=True)),
            [1, 2],
        )
        self.assertEqual(
            VoteResult.objects.get(polling_unit=self.unit, candidate=self.cand_a, round=1).vote_count,
            6,
        )
        self.assertEqual(
            list(AuditLog.objects.order_by("id").values_list("action", flat=True)),
            [AuditLog.Action.submit, AuditLog.Action.recount],
        )
        self.assertEqual(AuditLog.objects.order_by("id").last().reason, "recount")

    def test_identical_payloads_are_not_idempotent(self) -> None:
        self._submit(6, 4, signatures=10)
        second = self._submit(6, 4, signatures=10, reason="again")
        third = self._submit(6, 4, signatures=10, reason="again")

        self.assertEqual((second.round, third.round), (2, 3))
        self.assertEqual(UnitSubmission.objects.filter(polling_unit=self.unit, round=2).count(), 1)

    def test_rounds_are_per_unit(self) -> None:
        other = create_unit("Room 102")
        self._submit(6, 4, signatures=10)

        receipt = submit_official_result(
            polling_unit_id=other.id,
            total_signatures=1,
            votes=[{"candidateId": self.cand_a.id, "voteCount": 1}],
            submitted_by="staff2",
        )

        self.assertEqual(receipt.round, 1)

    def test_balance_mismatch_rejected_without_writes(self) -> None:
        with self.assertRaises(BalanceError) as ctx:
            self._submit(5, 4, signatures=10)

        self.assertEqual(ctx.exception.total_counted, 9)
        self.assertEqual(ctx.exception.total_signatures, 10)
        self.assertEqual(ctx.exception.difference, 1)
        self.assertEqual(
            ctx.exception.as_payload()["difference"],
            1,
        )
        self.assertFalse(UnitSubmission.objects.filter(polling_unit=self.unit).exists())
        self.assertFalse(VoteResult.objects.filter(polling_unit=self.unit).exists())
        self.assertFalse(AuditLog.objects.exists())

    def test_balance_counts_no_vote_and_void(self) -> None:
        receipt = self._submit(5, 3, signatures=10, total_no_vote=1, total_void_ballots=1)

        self.assertEqual(receipt.submission.total_no_vote, 1)
        self.assertEqual(receipt.submission.total_void_ballots, 1)

    def test_recount_without_reason_rejected(self) -> None:
        self._submit(6, 4, signatures=10)

        for reason in ("", "   "):
            with self.subTest(reason=reason):
                with self.assertRaises(MissingReasonError) as ctx:
                    self._submit(7, 3, signatures=10, reason=reason)
                self.assertEqual(ctx.exception.round_number, 2)

        self.assertEqual(UnitSubmission.objects.filter(polling_unit=self.unit).count(), 1)
        self.assertEqual(AuditLog.objects.count(), 1)

    def test_missing_fields_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            submit_official_result(polling_unit_id=self.unit.id, total_signatures=None, votes=[], submitted_by="s")
        with self.assertRaises(ValidationError):
            submit_official_result(polling_unit_id=self.unit.id, total_signatures=0, votes=None, submitted_by="s")
        with self.assertRaises(ValidationError):
            submit_official_result(polling_unit_id=None, total_signatures=0, votes=[], submitted_by="s")

    def test_malformed_counts_rejected(self) -> None:
        for bad in (-1, "ten", 2.5, True):
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError):
                    submit_official_result(
                        polling_unit_id=self.unit.id,
                        total_signatures=bad,
                        votes=[],
                        submitted_by="s",
                    )

    def test_infinite_counts_rejected(self) -> None:
        for bad in (float("inf"), float("-inf")):
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError) as ctx:
                    self._submit(6, 4, signatures=10, total_no_vote=bad)
                self.assertEqual(ctx.exception.fields, ("totalNoVote",))

        with self.assertRaises(ValidationError):
            self._submit(float("inf"), 4, signatures=10)
        self.assertFalse(UnitSubmission.objects.exists())

    def test_counts_beyond_storage_range_rejected_before_writes(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self._submit(10**20, 0, signatures=10**20)
        self.assertEqual(ctx.exception.fields, ("totalSignatures",))

        with self.assertRaises(ValidationError) as ctx:
            self._submit(MAX_COUNT + 1, 0, signatures=10)
        self.assertEqual(ctx.exception.fields, ("votes[0].voteCount",))

        self.assertFalse(UnitSubmission.objects.exists())
        self.assertFalse(AuditLog.objects.exists())

    def test_unknown_unit_raises_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            submit_official_result(
                polling_unit_id=self.unit.id + 999,
                total_signatures=1,
                votes=[{"candidateId": self.cand_a.id, "voteCount": 1}],
                submitted_by="s",
            )
        self.assertFalse(UnitSubmission.objects.exists())

    def test_unknown_candidate_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            submit_official_result(
                polling_unit_id=self.unit.id,
                total_signatures=1,
                votes=[{"candidateId": self.cand_b.id + 999, "voteCount": 1}],
                submitted_by="s",
            )

        self.assertEqual(ctx.exception.fields, ("votes",))
        self.assertFalse(UnitSubmission.objects.exists())

    def test_round_collision_surfaces_as_retryable_conflict(self) -> None:
        self._submit(6, 4, signatures=10)

        # Simulate a concurrent writer that read the same max round.
        with patch("core.submissions._next_round", return_value=1):
            with self.assertRaises(ConflictError) as ctx:
                self._submit(6, 4, signatures=10)

        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(ctx.exception.attempted_round, 1)
        self.assertEqual(ctx.exception.polling_unit_id, self.unit.id)
        self.assertEqual(UnitSubmission.objects.filter(polling_unit=self.unit).count(), 1)
        self.assertEqual(VoteResult.objects.filter(polling_unit=self.unit).count(), 2)

    def test_other_integrity_failures_are_store_errors(self) -> None:
        with (
            patch(
                "core.submissions.VoteResult.objects.create",
                side_effect=IntegrityError("FOREIGN KEY constraint failed"),
            ),
            self.assertLogs("core.submissions", level="ERROR"),
        ):
            with self.assertRaises(StoreError):
                self._submit(6, 4, signatures=10)

        self.assertFalse(UnitSubmission.objects.exists())
        self.assertFalse(AuditLog.objects.exists())

    def test_store_failure_rolls_back_partial_writes(self) -> None:
        with (
            patch("core.submissions.AuditLog.objects.create", side_effect=OperationalError("disk I/O error")),
            self.assertLogs("core.submissions", level="ERROR"),
        ):
            with self.assertRaises(StoreError) as ctx:
                self._submit(6, 4, signatures=10)

        self.assertTrue(ctx.exception.retryable)
        self.assertFalse(UnitSubmission.objects.exists())
        self.assertFalse(VoteResult.objects.exists())


class ParseVoteLinesTests(TestCase):
    def test_duplicate_candidates_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            parse_vote_lines([{"candidateId": 1, "voteCount": 1}, {"candidateId": 1, "voteCount": 2}])

    def test_votes_must_be_list_of_objects(self) -> None:
        with self.assertRaises(ValidationError):
            parse_vote_lines({"candidateId": 1})
        with self.assertRaises(ValidationError):
            parse_vote_lines([1, 2])

    def test_numeric_strings_are_accepted(self) -> None:
        lines = parse_vote_lines([{"candidateId": "3", "voteCount": "7"}])

        self.assertEqual((lines[0].candidate_id, lines[0].vote_count), (3, 7))


class SubmissionStatusTests(TestCase):
    def test_status_lists_rounds_descending_with_latest_votes(self) -> None:
        cand_a, cand_b = create_candidates(2)
        unit = create_unit("Room 201")
        for a, b, reason in ((6, 4, ""), (7, 3, "recount")):
            submit_official_result(
                polling_unit_id=unit.id,
                total_signatures=10,
                votes=[{"candidateId": cand_a.id, "voteCount": a}, {"candidateId": cand_b.id, "voteCount": b}],
                submitted_by="staff1",
                reason=reason,
            )

        status = submission_status(polling_unit_id=unit.id)

        self.assertEqual(status.current_round, 2)
        self.assertEqual([s.round for s in status.submissions], [2, 1])
        self.assertEqual([(v.candidate_id, v.vote_count) for v in status.latest_votes], [(cand_a.id, 7), (cand_b.id, 3)])

    def test_status_for_unit_without_submissions(self) -> None:
        unit = create_unit("Room 202")

        status = submission_status(polling_unit_id=unit.id)

        self.assertEqual(status.current_round, 0)
        self.assertEqual(status.submissions, [])
        self.assertEqual(status.latest_votes, [])
