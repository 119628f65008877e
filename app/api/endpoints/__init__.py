"""API endpoints package."""

from . import health
from . import generated_proposals
from . import calculations

__all__ = ["health", "generated_proposals", "calculations"]
