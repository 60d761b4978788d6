"""HTTP transport for the BLAST URL API."""

from .http import BlastTransport

__all__ = ["BlastTransport"]
