"""Pytest configuration and fixtures."""

import asyncio
from typing import Dict, List, Optional

import pytest

SUBMISSION_BODY = """<!--QBlastInfoBegin
    RID = ABC123
    RTOE = 17
QBlastInfoEnd
-->
"""

RESULT_XML = """<?xml version="1.0"?>
<!DOCTYPE BlastOutput PUBLIC "-//NCBI//NCBI BlastOutput/EN" "http://www.ncbi.nlm.nih.gov/dtd/NCBI_BlastOutput.dtd">
<BlastOutput>
  <BlastOutput_program>blastp</BlastOutput_program>
  <BlastOutput_db>nr</BlastOutput_db>
  <BlastOutput_iterations>
    <Iteration>
      <Iteration_iter-num>1</Iteration_iter-num>
      <Iteration_hits>
        <Hit>
          <Hit_id>gi|1</Hit_id>
          <Hit_len>120</Hit_len>
        </Hit>
        <Hit>
          <Hit_id>gi|2</Hit_id>
          <Hit_len>98</Hit_len>
        </Hit>
      </Iteration_hits>
    </Iteration>
  </BlastOutput_iterations>
</BlastOutput>
"""


def status_body(token: Optional[str]) -> str:
    line = f"\tStatus={token}\n" if token else ""
    return f"<!--\nQBlastInfoBegin\n{line}QBlastInfoEnd\n-->\n"


class FakeTransport:
    """Records requests and replays canned bodies in order."""

    def __init__(self, submit_body: str = SUBMISSION_BODY, get_bodies: Optional[List] = None):
        self.submit_body = submit_body
        self.get_bodies = list(get_bodies or [])
        self.posts: List[Dict[str, str]] = []
        self.gets: List[Dict[str, str]] = []

    @property
    def calls(self) -> int:
        return len(self.posts) + len(self.gets)

    async def post_form(self, data):
        self.posts.append(dict(data))
        if isinstance(self.submit_body, Exception):
            raise self.submit_body
        return self.submit_body

    async def get(self, params):
        self.gets.append(dict(params))
        body = self.get_bodies.pop(0)
        if isinstance(body, Exception):
            raise body
        return body

    def status_checks(self) -> List[Dict[str, str]]:
        return [g for g in self.gets if g.get("FORMAT_OBJECT") == "SearchInfo"]

    def fetches(self) -> List[Dict[str, str]]:
        return [g for g in self.gets if g.get("FORMAT_TYPE") == "XML"]


class FakeClock:
    """Sleep replacement that records delays without waiting."""

    def __init__(self):
        self.sleeps: List[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_transport():
    def _make(get_bodies=None, submit_body=SUBMISSION_BODY):
        return FakeTransport(submit_body=submit_body, get_bodies=get_bodies)

    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove BLASTR_* variables so defaults apply."""
    for key in (
        "BLASTR_ENDPOINT",
        "BLASTR_TICK_INTERVAL",
        "BLASTR_REQUEST_TIMEOUT",
        "BLASTR_MAX_POLLS",
        "BLASTR_USER_AGENT",
        "BLASTR_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def result_xml():
    return RESULT_XML


@pytest.fixture
def status():
    """Build a SearchInfo body carrying the given Status token."""
    return status_body
