"""Job poller for the NCBI BLAST URL API.

How a search runs:
1. POST the request (CMD=Put) and read RID and RTOE from the reply
2. Wait RTOE seconds, then check SearchInfo every tick interval
3. On Status=READY fetch the XML report and parse it
4. Deliver the parsed tree, or exactly one error

Each invocation keeps its state in its own _PollSession, so one JobPoller can
drive any number of concurrent searches.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import quote

from .config import PollerConfig
from .core.errors import (
    PollLimitExceededError,
    ResultParseError,
    SearchExpiredError,
    SearchFailedError,
    UnsupportedProgramError,
)
from .core.models import JobHandle, JobStatus, PollState, Program, SearchRequest, SearchResult
from .core.parsing import classify_status, parse_result_document, parse_submission
from .transport import BlastTransport

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone besides alphanumerics.
QUERY_SAFE_CHARS = "-_.!~*'()"

Callback = Callable[[Optional[Exception], Optional[SearchResult]], None]
SleepFunc = Callable[[float], Awaitable[None]]


def resolve_program(program: Union[str, Program]) -> Program:
    """Validate a program name against the supported BLAST algorithms."""
    try:
        return Program(program)
    except ValueError:
        raise UnsupportedProgramError(str(program), Program.values()) from None


def encode_query(query: str) -> str:
    return quote(query, safe=QUERY_SAFE_CHARS)


def build_submission_form(request: SearchRequest) -> Dict[str, str]:
    """Form fields for a CMD=Put submission."""
    program = resolve_program(request.program)
    return {
        "CMD": "Put",
        "PROGRAM": program.wire_value,
        "DATABASE": request.database,
        "QUERY": encode_query(request.query),
    }


def status_params(job_id: str) -> Dict[str, str]:
    return {"CMD": "Get", "FORMAT_OBJECT": "SearchInfo", "RID": job_id}


def result_params(job_id: str) -> Dict[str, str]:
    return {"CMD": "Get", "FORMAT_TYPE": "XML", "RID": job_id}


class SearchHandle:
    """Cancellation handle for one invocation started with JobPoller.run().

    Once cancel() returns, the invocation issues no further requests and its
    callback is never called.
    """

    def __init__(self):
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self._delivered = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def delivered(self) -> bool:
        return self._delivered

    def cancel(self) -> bool:
        """Abort the invocation. Returns False if the callback already ran."""
        if self._delivered:
            return False
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return True

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> None:
        """Wait until the invocation has delivered or been cancelled."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._cancelled:
                raise


class _PollSession:
    """State machine for a single job id."""

    def __init__(self, poller: "JobPoller", job_id: str, handle: Optional[SearchHandle] = None):
        self.poller = poller
        self.job_id = job_id
        self.handle = handle
        self.state = PollState.WAITING
        self.history: List[PollState] = [PollState.WAITING]
        self.polls = 0

    def _transition(self, state: PollState) -> None:
        logger.debug(f"Search {self.job_id}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _ensure_active(self) -> None:
        if self.handle is not None and self.handle.cancelled:
            raise asyncio.CancelledError()

    async def _suspend(self, seconds: float) -> None:
        if seconds > 0:
            await self.poller._sleep(seconds)
        self._ensure_active()

    async def run(self, initial_delay: float) -> SearchResult:
        config = self.poller.config
        logger.info(
            f"Updating search info for query {self.job_id} every {config.tick_interval:g} seconds "
            f"(first check in {initial_delay:g}s)"
        )
        await self._suspend(initial_delay)

        while True:
            self._transition(PollState.CHECKING)
            self.polls += 1
            logger.info(f"Updating search info for query {self.job_id} (check {self.polls})")
            status = await self.poller.check_status(self.job_id)

            if status is JobStatus.FAILED:
                self._transition(PollState.FAILED)
                logger.warning(f"Search {self.job_id} failed upstream")
                raise SearchFailedError(self.job_id)

            if status is JobStatus.EXPIRED:
                self._transition(PollState.EXPIRED)
                logger.warning(f"Search {self.job_id} expired upstream")
                raise SearchExpiredError(self.job_id)

            if status is JobStatus.READY:
                self._transition(PollState.FETCHING)
                return await self._fetch()

            self._transition(PollState.WAITING)
            if config.max_polls is not None and self.polls >= config.max_polls:
                logger.warning(f"Search {self.job_id} not ready after {self.polls} checks, giving up")
                raise PollLimitExceededError(self.job_id, self.polls)
            await self._suspend(config.tick_interval)

    async def _fetch(self) -> SearchResult:
        self._ensure_active()
        logger.info(f"Fetching search results for query {self.job_id}")
        try:
            result = await self.poller.fetch_result(self.job_id)
        except ResultParseError:
            self._transition(PollState.FAILED)
            raise
        self._transition(PollState.DONE)
        logger.info(f"Search {self.job_id} completed after {self.polls} status checks")
        return result


class JobPoller:
    """
    Drives BLAST searches from submission to a terminal result.

    The transport and the sleep coroutine are injectable so tests can replace
    the network and the clock.
    """

    def __init__(
        self,
        config: Optional[PollerConfig] = None,
        transport=None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize job poller.

        Args:
            config: Poller configuration (default: PollerConfig())
            transport: Object with async post_form(data) and get(params);
                defaults to a BlastTransport on config.endpoint
            sleep: Coroutine used for every suspension (default: asyncio.sleep)
        """
        self.config = config or PollerConfig()
        self.transport = transport or BlastTransport(
            self.config.endpoint,
            timeout=self.config.request_timeout,
            user_agent=self.config.user_agent,
        )
        self._sleep = sleep or asyncio.sleep

    async def submit(self, request: SearchRequest) -> JobHandle:
        """
        Submit a search and return its job handle.

        Raises:
            UnsupportedProgramError: Before any request, for unknown programs
            TransportError: If the POST fails
            SubmissionParseError: If RID or RTOE is missing from the reply
        """
        form = build_submission_form(request)
        logger.info(
            f"Querying NCBI database {request.database} with program {form['PROGRAM']} "
            f"({len(request.query)} query characters)"
        )
        body = await self.transport.post_form(form)
        handle = parse_submission(body)
        logger.info(f"Search submitted: RID {handle.job_id}, estimated wait {handle.estimated_wait_seconds:g}s")
        return handle

    async def check_status(self, job_id: str) -> JobStatus:
        """Issue one SearchInfo request and classify it."""
        body = await self.transport.get(status_params(job_id))
        status = classify_status(body)
        logger.debug(f"Search {job_id} status: {status.value}")
        return status

    async def fetch_result(self, job_id: str) -> SearchResult:
        """Download and parse the XML report of a finished search."""
        body = await self.transport.get(result_params(job_id))
        return parse_result_document(body, job_id=job_id)

    async def poll(
        self,
        job_id: str,
        initial_delay: float = 0.0,
        handle: Optional[SearchHandle] = None,
    ) -> SearchResult:
        """
        Poll a submitted search until it reaches a terminal state.

        Args:
            job_id: RID of the search
            initial_delay: Seconds to wait before the first status check
            handle: Optional cancellation handle checked before each request

        Returns:
            Parsed result document

        Raises:
            SearchFailedError, SearchExpiredError, ResultParseError,
            TransportError, PollLimitExceededError
        """
        session = _PollSession(self, job_id, handle)
        return await session.run(initial_delay)

    async def execute(self, request: SearchRequest, handle: Optional[SearchHandle] = None) -> SearchResult:
        """Submit (unless resuming an existing job id) and poll to completion."""
        resolve_program(request.program)
        if request.resumes_existing_job:
            logger.info(f"Fetching results for RID {request.existing_job_id}")
            return await self.poll(request.existing_job_id, 0.0, handle)

        job = await self.submit(request)
        if handle is not None and handle.cancelled:
            raise asyncio.CancelledError()
        return await self.poll(job.job_id, job.estimated_wait_seconds, handle)

    def run(self, request: SearchRequest, callback: Callback) -> SearchHandle:
        """
        Start a search in the background.

        Must be called with a running event loop. ``callback(error, result)``
        is invoked exactly once, unless the returned handle is cancelled first.
        """
        handle = SearchHandle()
        handle._task = asyncio.get_running_loop().create_task(self._drive(request, callback, handle))
        return handle

    async def _drive(self, request: SearchRequest, callback: Callback, handle: SearchHandle) -> None:
        error: Optional[Exception] = None
        result: Optional[SearchResult] = None
        try:
            result = await self.execute(request, handle)
        except Exception as e:
            error = e

        if handle.cancelled:
            return
        handle._delivered = True
        if error is not None:
            callback(error, None)
        else:
            callback(None, result)


def search(
    program: str = "blastp",
    database: str = "nr",
    query: str = "",
    rid: Optional[str] = None,
    callback: Optional[Callback] = None,
    config: Optional[PollerConfig] = None,
) -> SearchHandle:
    """
    Query an NCBI database using BLAST.

    Args:
        program: blastn, megablast, blastp, blastx, tblastn or tblastx
        database: Target database (e.g. nr, nt, swissprot)
        query: Accession, GI or FASTA text
        rid: Resume polling an already submitted search instead of submitting
        callback: ``callback(error, result)``, invoked exactly once
        config: Poller configuration (default: from environment)

    Returns:
        Cancellation handle for the running search
    """
    if callback is None:
        raise TypeError("search() requires a callback")
    request = SearchRequest(query=query, program=program, database=database, existing_job_id=rid)
    poller = JobPoller(config or PollerConfig.from_env())
    return poller.run(request, callback)
