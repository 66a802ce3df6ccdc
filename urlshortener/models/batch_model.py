from dataclasses import dataclass


@dataclass(frozen=True)
class BatchRequestRecord:
    """One URL submitted in a batch shortening request.

    Attributes:
        correlation_id (str):
            Caller-chosen key echoed back in the matching BatchResponseRecord.
        original_url (str):
            The URL to shorten.
    """

    correlation_id: str
    original_url: str


@dataclass(frozen=True)
class BatchResponseRecord:
    """Short id assigned to one BatchRequestRecord, matched by correlation id."""

    correlation_id: str
    id: int
