"""
Error taxonomy for the marketing analytics engine.

Only two kinds of failure ever leave the engine:

- ValidationError: the caller's time-selection parameters are malformed or
  contradictory. Raised before any read is issued; maps to HTTP 400.
- InfrastructureError: a storage read failed. The whole request is aborted,
  no partial report is built; maps to HTTP 500 with a generic message.

Data-quality problems in upstream rows (NaN, Infinity, negative counts, null
rows, missing join partners) are not errors. They are absorbed by
marketing_analytics.services.normalization.
"""

from typing import Optional


class MarketingAnalyticsError(Exception):
    """Base class for errors raised by the engine."""


class ValidationError(MarketingAnalyticsError):
    """
    Caller input was rejected.

    Attributes:
        reason: Human-readable, actionable message returned to the client.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InfrastructureError(MarketingAnalyticsError):
    """
    A storage read failed and the request was aborted.

    Attributes:
        query_id: Identifier of the catalogued query that failed, if known.
    """

    def __init__(self, message: str, query_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.query_id = query_id
