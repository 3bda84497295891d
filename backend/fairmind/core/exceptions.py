"""
Domain errors
"""


class FairMindError(Exception):
    """Base class for errors surfaced to the caller"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class AuthenticationFailed(FairMindError):
    status_code = 401
    default_message = "Unauthorized"


class AccessDenied(FairMindError):
    status_code = 403
    default_message = "Access denied"


class NotFound(FairMindError):
    status_code = 404
    default_message = "Not found"


class InvalidRequest(FairMindError):
    status_code = 400
    default_message = "Invalid request"


class AlreadyVoted(FairMindError):
    status_code = 400
    default_message = "Already voted"


class InsufficientContext(FairMindError):
    status_code = 400
    default_message = "Need at least 4 messages to generate resolutions"


class QuotaExceeded(FairMindError):
    status_code = 429
    default_message = "Daily resolution limit reached"

    def __init__(self, message: str = None, remaining: int = 0):
        super().__init__(message)
        self.remaining = remaining

    def to_dict(self) -> dict:
        return {"message": self.message, "remaining": self.remaining}


class GenerationInProgress(FairMindError):
    status_code = 409
    default_message = "Resolutions are already being generated for this room"


class GenerationFailure(FairMindError):
    """Malformed or unavailable output from the resolution generator.

    Recovered inside the generator client; never mapped to a response.
    """

    status_code = 502
    default_message = "Resolution generation failed"
