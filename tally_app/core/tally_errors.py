"""Structured error kinds raised by the tally services.

Services never build user-facing sentences; views map these kinds to HTTP
responses and messages.
"""

from __future__ import annotations


class TallyError(Exception):
    retryable: bool = False

    def as_payload(self) -> dict[str, object]:
        return {"error": str(self)}


class ValidationError(TallyError):
    def __init__(self, message: str, *, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields

    def as_payload(self) -> dict[str, object]:
        payload = super().as_payload()
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload


class BalanceError(TallyError):
    def __init__(self, *, total_counted: int, total_signatures: int) -> None:
        self.total_counted = total_counted
        self.total_signatures = total_signatures
        self.difference = abs(total_counted - total_signatures)
        super().__init__(
            f"counted {total_counted} != signatures {total_signatures} (difference {self.difference})"
        )

    def as_payload(self) -> dict[str, object]:
        return {
            "error": str(self),
            "totalVotesCounted": self.total_counted,
            "totalSignatures": self.total_signatures,
            "difference": self.difference,
        }


class MissingReasonError(TallyError):
    def __init__(self, *, round_number: int) -> None:
        self.round_number = round_number
        super().__init__(f"round {round_number} requires a reason")

    def as_payload(self) -> dict[str, object]:
        return {"error": str(self), "round": self.round_number}


class NotFoundError(TallyError):
    pass


class ConflictError(TallyError):
    retryable = True

    def __init__(self, message: str, *, polling_unit_id: int, attempted_round: int) -> None:
        super().__init__(message)
        self.polling_unit_id = polling_unit_id
        self.attempted_round = attempted_round

    def as_payload(self) -> dict[str, object]:
        return {
            "error": str(self),
            "retryable": True,
            "pollingUnitId": self.polling_unit_id,
            "attemptedRound": self.attempted_round,
        }


class StoreError(TallyError):
    retryable = True
