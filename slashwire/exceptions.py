"""Exception hierarchy for slashwire.

Every error raised by the registry, the dispatcher, the sync layer and
the REST client derives from SlashwireError, so callers can catch
broadly or per subsystem.

Registration errors are raised synchronously while an application
declares its handlers. Handler errors are raised by the dispatcher
and carry a HandlerErrorKind for programmatic matching::

    try:
        await handler.handle_interaction(shard, payload)
    except HandlerError as e:
        if e.kind == HandlerErrorKind.NOT_FOUND:
            ...
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of errors for escalation decisions."""
    TRANSIENT = "transient"          # Platform-side, may succeed later (429, 5xx)
    PERMANENT = "permanent"          # Bad input or misuse
    INFRASTRUCTURE = "infrastructure"  # Missing config, client not ready


class SlashwireError(Exception):
    """Base exception for all slashwire errors.

    Attributes:
        message: Human-readable error description.
        category: Error classification.
        module: Originating module name (e.g. "registry").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category
        self.module = module
        self.context = context
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether the failure may succeed if the caller tries again."""
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return (
            f"{cls}({self.message!r}, category={self.category.value!r}, "
            f"module={self.module!r})"
        )


# ---------------------------------------------------------------------------
# Registration exceptions
# ---------------------------------------------------------------------------

class RegistrationError(SlashwireError, ValueError):
    """Misuse of the registration API, detected at declaration time."""

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(
            message, category=category, module=module or "registry", **context
        )


class DuplicateCommandError(RegistrationError):
    """A handler is already registered under the same identity key.

    Attributes:
        kind: The CommandKind bucket that holds the existing handler.
        name: The name as passed by the caller.
        option_name: Focused option (autocomplete only).
    """

    def __init__(
        self,
        message: str = "",
        *,
        kind: Optional[str] = None,
        name: Optional[str] = None,
        option_name: str = "",
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.kind = kind
        self.name = name
        self.option_name = option_name
        super().__init__(message, module=module, **context)


class EmptyDescriptionError(RegistrationError):
    """A slash command was declared without a description."""

    def __init__(
        self,
        message: str = "",
        *,
        name: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.name = name
        super().__init__(message, module=module or "handler", **context)


class UnknownOptionError(RegistrationError):
    """An autocomplete handler links to an option the slash command never declared.

    Attributes:
        command_name: Slash command the autocomplete belongs to.
        option_name: The option that could not be found.
    """

    def __init__(
        self,
        message: str = "",
        *,
        command_name: Optional[str] = None,
        option_name: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command_name = command_name
        self.option_name = option_name
        super().__init__(message, module=module or "handler", **context)


# ---------------------------------------------------------------------------
# Dispatch exceptions
# ---------------------------------------------------------------------------

class HandlerErrorKind(str, Enum):
    """Categorises errors raised during interaction dispatch."""
    NOT_IMPLEMENTED = "not_implemented"
    NOT_FOUND = "not_found"
    INVALID_INTERACTION = "invalid_interaction"


class HandlerError(SlashwireError):
    """Error raised while routing an interaction.

    Attributes:
        kind: HandlerErrorKind used to tell failures apart.
    """

    default_kind = HandlerErrorKind.INVALID_INTERACTION

    def __init__(
        self,
        message: str = "",
        *,
        kind: Optional[HandlerErrorKind] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.kind = kind or self.default_kind
        super().__init__(
            message, category=category, module=module or "dispatch", **context
        )


class CommandNotFoundError(HandlerError, LookupError):
    """No handler is registered for the command or custom id."""

    default_kind = HandlerErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str = "",
        *,
        command_kind: Optional[str] = None,
        name: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command_kind = command_kind
        self.name = name
        super().__init__(message, module=module or "registry", **context)


class InvalidInteractionError(HandlerError):
    """The interaction payload lacks a field needed to route it."""

    default_kind = HandlerErrorKind.INVALID_INTERACTION


class NotImplementedInteractionError(HandlerError):
    """The interaction type or command subtype is not supported."""

    default_kind = HandlerErrorKind.NOT_IMPLEMENTED


# ---------------------------------------------------------------------------
# Configuration exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(SlashwireError):
    """Invalid or missing configuration.

    Defaults to INFRASTRUCTURE because config issues are environmental
    and won't resolve by retrying.
    """

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(
            message, category=category, module=module or "config", **context
        )


class ScopeUnavailableError(ConfigurationError):
    """Commands cannot be published before the application id is known."""

    def __init__(
        self,
        message: str = "",
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(
            message,
            setting_name="application_id",
            module=module or "sync",
            **context,
        )


# ---------------------------------------------------------------------------
# Platform exceptions
# ---------------------------------------------------------------------------

class PlatformAPIError(SlashwireError):
    """The Discord REST API answered with a non-success status.

    Attributes:
        status: HTTP status code.
        body: Truncated response body.
    """

    def __init__(
        self,
        message: str = "",
        *,
        status: Optional[int] = None,
        body: str = "",
        category: Optional[ErrorCategory] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.status = status
        self.body = body
        if category is None:
            if status is not None and (status == 429 or status >= 500):
                category = ErrorCategory.TRANSIENT
            else:
                category = ErrorCategory.PERMANENT
        super().__init__(
            message, category=category, module=module or "client", status=status, **context
        )
