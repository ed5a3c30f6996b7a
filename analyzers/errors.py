"""
Error taxonomy shared by the analyzers and the API layer.

  ValidationError      missing / invalid input, user-correctable (HTTP 400)
  UpstreamUnavailable  optional enrichment failed; the facet becomes null
  InternalError        unexpected computation fault (HTTP 500)
"""


class AnalysisError(Exception):
    """Base class for all engine errors."""

    kind = "internal"


class ValidationError(AnalysisError, ValueError):
    kind = "validation"


class UpstreamUnavailable(AnalysisError):
    kind = "upstream"

    def __init__(self, service: str, reason: str = ""):
        self.service = service
        self.reason = reason
        message = f"{service} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InternalError(AnalysisError):
    kind = "internal"

    GENERIC_MESSAGE = "Internal analysis error"

    def __init__(self, message: str = GENERIC_MESSAGE, details: str = ""):
        self.details = details
        super().__init__(message)
