"""blastr package exports.

Keep package import lightweight by lazily importing the poller stack.
"""

from typing import TYPE_CHECKING, Any

__version__ = "1.0.0"

if TYPE_CHECKING:
    from .config import PollerConfig
    from .poller import JobPoller, SearchHandle, search

__all__ = ["JobPoller", "PollerConfig", "SearchHandle", "search"]


def __getattr__(name: str) -> Any:
    """Lazily resolve top-level exports."""
    if name == "PollerConfig":
        from .config import PollerConfig

        return PollerConfig

    if name in {"JobPoller", "SearchHandle", "search"}:
        from . import poller

        return getattr(poller, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
