"""Data model for a single remote BLAST search invocation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Parsed XML result tree; see blastr.core.parsing.parse_result_document.
SearchResult = Dict[str, Any]


class Program(str, Enum):
    """BLAST algorithms accepted by the search service."""

    BLASTN = "blastn"
    MEGABLAST = "megablast"
    BLASTP = "blastp"
    BLASTX = "blastx"
    TBLASTN = "tblastn"
    TBLASTX = "tblastx"

    @classmethod
    def values(cls) -> list:
        return [p.value for p in cls]

    @property
    def wire_value(self) -> str:
        """PROGRAM field value sent on submission.

        megablast has no PROGRAM value of its own upstream; it is requested as
        blastp with the MEGABLAST flag carried in the same field.
        """
        if self is Program.MEGABLAST:
            return "blastp&MEGABLAST=on"
        return self.value


class JobStatus(str, Enum):
    """Classification of one status-check response."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class PollState(str, Enum):
    """States of the poll state machine."""

    WAITING = "waiting"
    CHECKING = "checking"
    FETCHING = "fetching"
    FAILED = "failed"
    EXPIRED = "expired"
    DONE = "done"

    @property
    def is_terminal(self) -> bool:
        return self in (PollState.FAILED, PollState.EXPIRED, PollState.DONE)


@dataclass
class SearchRequest:
    """Request object for one search invocation."""

    query: str
    program: str = Program.BLASTP.value
    database: str = "nr"
    existing_job_id: Optional[str] = None

    @property
    def resumes_existing_job(self) -> bool:
        return bool(self.existing_job_id)


@dataclass(frozen=True)
class JobHandle:
    """Identifier and wait estimate returned by a successful submission."""

    job_id: str
    estimated_wait_seconds: float
