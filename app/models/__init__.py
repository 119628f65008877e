"""Data models for the presales core."""

from .proposal import CommercialProposal, ClientInfo, CoverInfo
from .generated_proposal import (
    GeneratedProposal,
    GeneratedProposalStatus,
    GeneratedProposalSummary,
    StatusUpdate,
)
from .error import ErrorResponse

__all__ = [
    # Source proposal models
    "CommercialProposal",
    "ClientInfo",
    "CoverInfo",
    # Generated proposal models
    "GeneratedProposal",
    "GeneratedProposalStatus",
    "GeneratedProposalSummary",
    "StatusUpdate",
    # Error models
    "ErrorResponse",
]
