"""Models, errors and response parsers for the BLAST job protocol."""

from .errors import (
    BlastrError,
    ConfigurationError,
    PollLimitExceededError,
    ResultParseError,
    SearchExpiredError,
    SearchFailedError,
    SubmissionParseError,
    TransportError,
    UnsupportedProgramError,
)
from .models import JobHandle, JobStatus, PollState, Program, SearchRequest, SearchResult
from .parsing import classify_status, parse_result_document, parse_submission

__all__ = [
    "BlastrError",
    "ConfigurationError",
    "PollLimitExceededError",
    "ResultParseError",
    "SearchExpiredError",
    "SearchFailedError",
    "SubmissionParseError",
    "TransportError",
    "UnsupportedProgramError",
    "JobHandle",
    "JobStatus",
    "PollState",
    "Program",
    "SearchRequest",
    "SearchResult",
    "classify_status",
    "parse_result_document",
    "parse_submission",
]
