"""Parsers for the three plain-text/XML bodies the BLAST URL API returns."""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from .errors import ResultParseError, SubmissionParseError
from .models import JobHandle, JobStatus, SearchResult

logger = logging.getLogger(__name__)

RID_PATTERN = re.compile(r"^ {4}RID = (.*)$", re.MULTILINE)
RTOE_PATTERN = re.compile(r"^ {4}RTOE = (.*)$", re.MULTILINE)

# Checked in this order; the first token present wins.
STATUS_TOKENS = (
    ("Status=FAILED", JobStatus.FAILED),
    ("Status=UNKNOWN", JobStatus.EXPIRED),
    ("Status=READY", JobStatus.READY),
)


def parse_submission(body: str) -> JobHandle:
    """Extract RID and RTOE from a ``CMD=Put`` response.

    Raises:
        SubmissionParseError: If either line is missing or RTOE is not numeric
    """
    rid_match = RID_PATTERN.search(body)
    if not rid_match or not rid_match.group(1).strip():
        raise SubmissionParseError("RID")

    rtoe_match = RTOE_PATTERN.search(body)
    if not rtoe_match:
        raise SubmissionParseError("RTOE")

    try:
        wait = float(rtoe_match.group(1).strip())
    except ValueError:
        raise SubmissionParseError("a numeric RTOE") from None

    return JobHandle(job_id=rid_match.group(1).strip(), estimated_wait_seconds=wait)


def classify_status(body: str) -> JobStatus:
    """Classify a ``FORMAT_OBJECT=SearchInfo`` response by substring match.

    The SearchInfo reply is a flat text block, so this deliberately does not
    parse fields. Any other ``Status=`` token (WAITING in practice) is
    PENDING; a body with no token at all is UNKNOWN.
    """
    for token, status in STATUS_TOKENS:
        if token in body:
            return status
    if "Status=" in body:
        return JobStatus.PENDING
    return JobStatus.UNKNOWN


def _build_node(elem: ET.Element, child_nodes: List[Any]) -> Any:
    children = list(elem)
    fragments = [elem.text] + [child.tail for child in children]
    text = "".join(f.strip() for f in fragments if f)
    if not children and not elem.attrib:
        return text

    node: dict = {}
    if elem.attrib:
        node["$"] = dict(elem.attrib)
    if text:
        node["_"] = text
    for child, child_node in zip(children, child_nodes):
        node.setdefault(child.tag, []).append(child_node)
    return node


def _element_to_node(root: ET.Element) -> Any:
    # Post-order walk with an explicit stack; result documents can nest
    # deeper than the interpreter recursion limit.
    built: Dict[int, Any] = {}
    stack = [(root, False)]
    while stack:
        elem, expanded = stack.pop()
        if not expanded:
            stack.append((elem, True))
            stack.extend((child, False) for child in elem)
            continue
        built[id(elem)] = _build_node(elem, [built.pop(id(child)) for child in elem])
    return built[id(root)]


def parse_result_document(body: str, job_id: Optional[str] = None) -> SearchResult:
    """Parse the ``FORMAT_TYPE=XML`` body into a nested dict.

    The shape is ``{root_tag: node}``. A node without children or attributes
    is its stripped text. Otherwise it is a dict with attributes under ``"$"``,
    text under ``"_"`` (its own text joined with the tail text after each
    child) and one list per child tag, in document order.

    Raises:
        ResultParseError: If the body is empty or not well-formed XML
    """
    if not body or not body.strip():
        raise ResultParseError(job_id, "empty response body")

    try:
        root = ET.fromstring(body.strip())
    except ET.ParseError as e:
        raise ResultParseError(job_id, str(e)) from e

    logger.debug(f"Parsed result document <{root.tag}> for {job_id}")
    return {root.tag: _element_to_node(root)}
