"""Error hierarchy for the minutes workflow.

Every failure raised by a session action is a MinutesError subclass so that
adapters (HTTP handlers, terminal loop) can map them to a response without
inspecting messages. Errors are local to one action invocation: none of them
leave a session or the session store in a partially mutated state.
"""

from __future__ import annotations


class MinutesError(Exception):
    """Base class for all minutes workflow errors."""


class ConfigurationError(MinutesError):
    """Required configuration (API key, header template) is missing.

    Fatal at startup; never retried.
    """


class InvalidInputError(MinutesError, ValueError):
    """Caller supplied input the workflow cannot act on.

    Raised before any mutation: empty video URL, empty question or
    instruction, unknown action type.
    """


class SessionNotFoundError(InvalidInputError):
    """The session identifier does not match any live session."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id!r}")


class SessionStateError(InvalidInputError):
    """The action is not valid in the session's current state."""


class GenerationFailure(MinutesError):
    """The generation capability failed (network, quota, provider error).

    Attributes:
        tier: Model tier the call was routed to.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        tier: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.tier = tier
        self.original_error = original_error
        super().__init__(message)


class ParseContractViolation(GenerationFailure):
    """The model reply did not contain at least one delimited item.

    The transport succeeded but the reply broke the format contract. Callers
    may retry the same action.
    """

    def __init__(self, message: str, response_preview: str = "") -> None:
        self.response_preview = response_preview
        super().__init__(message)


class PersistenceError(MinutesError):
    """Writing or rotating the accepted output failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)
