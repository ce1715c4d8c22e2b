"""
Domain errors.

Every error carries a human-readable ``message`` and a stable ``code`` that
the API layer maps to an HTTP status.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class GenerationError(DomainError):
    """Raised when the deck could not be generated."""

    def __init__(self, reason: str, code: str = "GENERATION_ERROR"):
        super().__init__(reason, code)


class ConfigurationError(GenerationError):
    """Raised when the backend credential is missing or invalid."""

    def __init__(self, reason: str):
        super().__init__(reason, "CONFIGURATION_ERROR")


class InvalidTransitionError(DomainError):
    """Raised when an operation is not allowed in the current app state."""

    def __init__(self, operation: str, current_state: str):
        super().__init__(
            f"Cannot {operation} while the presentation is {current_state}",
            "INVALID_TRANSITION",
        )
        self.operation = operation
        self.current_state = current_state


class DeckNotReadyError(DomainError):
    """Raised when a deck operation is requested but no deck is loaded."""

    def __init__(self):
        super().__init__("No presentation is loaded", "DECK_NOT_READY")


class SlideIndexError(DomainError):
    """Raised when a slide index falls outside the deck."""

    def __init__(self, index: int, total: int):
        super().__init__(
            f"Slide index {index} is out of range for a deck of {total} slides",
            "SLIDE_INDEX_OUT_OF_RANGE",
        )
        self.index = index
        self.total = total


class RenderContractError(DomainError):
    """Raised when a slide lacks data its layout requires."""

    def __init__(self, reason: str):
        super().__init__(f"Render contract violated: {reason}", "RENDER_CONTRACT")


class ChatError(DomainError):
    pass


class EmptyMessageError(ChatError):
    def __init__(self):
        super().__init__("Message text cannot be empty", "EMPTY_MESSAGE")


class ChatBusyError(ChatError):
    def __init__(self):
        super().__init__("A reply is still being streamed", "CHAT_BUSY")
