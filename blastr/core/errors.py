"""Core exception hierarchy for blastr.

Every failure a search invocation can end with is one of these classes, so
callers can catch them all with a single ``except BlastrError`` clause or
branch on the specific subclass.

Exception Hierarchy:
    BlastrError (base)
    ├── UnsupportedProgramError - bad input, raised before any request
    ├── TransportError - network, IO or HTTP status failure
    ├── SubmissionParseError - RID/RTOE markers missing from submission reply
    ├── SearchFailedError - service reports Status=FAILED
    ├── SearchExpiredError - service reports Status=UNKNOWN
    ├── ResultParseError - final XML document malformed
    ├── PollLimitExceededError - opt-in poll bound reached
    └── ConfigurationError - invalid configuration values
"""

from typing import Any, Dict, Iterable, Optional

SUPPORT_CONTACT = "blast-help@ncbi.nlm.nih.gov"


class BlastrError(Exception):
    """Base exception for all blastr errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "SEARCH_FAILED")
        details: Optional dict with additional context
    """

    error_code: str = "BLASTR_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dict for JSON output."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class UnsupportedProgramError(BlastrError):
    """Requested program is not one of the supported BLAST algorithms."""

    error_code = "UNSUPPORTED_PROGRAM"

    def __init__(self, program: str, supported: Iterable[str] = ()):
        supported = list(supported)
        msg = f"{program} is not a supported BLAST algorithm"
        if supported:
            msg += f" (expected one of: {', '.join(supported)})"
        super().__init__(msg, details={"program": program, "supported": supported})
        self.program = program


class TransportError(BlastrError):
    """A request to the search service failed at the network or HTTP level."""

    error_code = "TRANSPORT_ERROR"

    def __init__(self, url: str, cause: BaseException):
        super().__init__(
            f"Request to {url} failed: {str(cause) or type(cause).__name__}",
            details={"url": url, "cause": type(cause).__name__},
        )
        self.url = url
        self.cause = cause


class SubmissionParseError(BlastrError):
    """Submission reply did not carry the expected RID/RTOE lines."""

    error_code = "SUBMISSION_PARSE"

    def __init__(self, missing: str):
        super().__init__(
            f"Could not find {missing} in the submission response; the service format may have changed.",
            details={"missing": missing},
        )
        self.missing = missing


class SearchFailedError(BlastrError):
    """Service reported the search as failed."""

    error_code = "SEARCH_FAILED"

    def __init__(self, job_id: str):
        super().__init__(
            f"Search {job_id} failed; Please report to {SUPPORT_CONTACT}",
            details={"job_id": job_id, "contact": SUPPORT_CONTACT},
        )
        self.job_id = job_id


class SearchExpiredError(BlastrError):
    """Service no longer tracks the search."""

    error_code = "SEARCH_EXPIRED"

    def __init__(self, job_id: str):
        super().__init__(f"Search {job_id} expired.", details={"job_id": job_id})
        self.job_id = job_id


class ResultParseError(BlastrError):
    """Result document could not be parsed."""

    error_code = "RESULT_PARSE"

    def __init__(self, job_id: Optional[str], reason: str):
        target = f"search {job_id}" if job_id else "search"
        super().__init__(
            f"Could not parse results for {target}: {reason}",
            details={"job_id": job_id, "reason": reason},
        )
        self.job_id = job_id


class PollLimitExceededError(BlastrError):
    """Configured maximum number of status checks was reached."""

    error_code = "POLL_LIMIT"

    def __init__(self, job_id: str, polls: int):
        super().__init__(
            f"Search {job_id} still not ready after {polls} status checks. "
            f"Resume later with the same RID.",
            details={"job_id": job_id, "polls": polls},
        )
        self.job_id = job_id
        self.polls = polls


class ConfigurationError(BlastrError):
    """Configuration value is invalid."""

    error_code = "CONFIG_ERROR"

    def __init__(self, config_key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid value for '{config_key}': {reason}",
            details={"config_key": config_key, "value": str(value), "reason": reason},
        )
