# core/errors.py

from typing import List, Optional


# ============================================================
# Authorization core error taxonomy
# ============================================================
class AuthCoreError(Exception):
    """Base class for errors returned as structured responses."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthenticationError(AuthCoreError):
    """Missing, malformed, invalid or expired credentials."""

    status_code = 401


class AuthorizationError(AuthCoreError):
    """Valid identity, insufficient role."""

    status_code = 403


class ValidationError(AuthCoreError):
    """Malformed privileged-operation payload."""

    status_code = 400


class ConflictError(AuthCoreError):
    """Operation conflicts with the caller's own account (self-delete)."""

    status_code = 400


class PartialFailure(AuthCoreError):
    """
    One or more batch items failed without aborting the batch.
    Informational: successful items stay committed.
    """

    status_code = 200

    def __init__(self, errors: List[str], succeeded: int = 0):
        super().__init__(f"{len(errors)} item(s) failed, {succeeded} succeeded")
        self.errors = list(errors)
        self.succeeded = succeeded


# ============================================================
# Supabase error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: Supabase errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or type(error).__name__
