from typing import Optional


class MarketplaceError(Exception):
    """Base class for every error raised by the marketplace client core."""


class RetrievalError(MarketplaceError):
    """A ledger resource read or view call failed."""


class DecodeError(MarketplaceError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ValidationError(MarketplaceError):
    """User supplied workflow input is missing or invalid."""


class SubmissionError(MarketplaceError):
    """Signing was rejected or the transaction failed to finalize."""


class SubmissionTimedOut(SubmissionError):
    pass


class WorkflowStateError(MarketplaceError):
    """A confirmation workflow was driven through an illegal transition."""
