"""
Error taxonomy for the browser session server.

Usage errors (bad parameters, unknown names) are raised immediately and never
retried. Engine failures are Playwright's own ``Error``/``TimeoutError`` and
are not wrapped. Collaborator failures carry the name of the collaborator that
failed so callers can tell an assertion problem from a vision problem.
"""
from typing import List, Optional


class BrowserMCPError(Exception):
    """Base exception for all browser session server errors."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        if not self.context:
            return self.message
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({context_str})"

    def to_dict(self):
        return {"error": self.message}


class ToolUsageError(BrowserMCPError):
    """Raised when a caller violates an operation's contract."""
    pass


class MissingParameterError(ToolUsageError):
    """Raised when a required parameter is absent."""

    def __init__(self, operation: str, parameter: str):
        super().__init__(f"{operation} requires {parameter} parameter")
        self.operation = operation
        self.parameter = parameter


class UnknownActionError(ToolUsageError):
    def __init__(self, action: str):
        super().__init__(f"Unknown action type: {action}")
        self.action = action


class UnknownAssertionError(ToolUsageError):
    def __init__(self, assertion: str):
        super().__init__(f"Unknown assertion type: {assertion}")
        self.assertion = assertion


class DuplicateSessionError(ToolUsageError):
    def __init__(self, name: str):
        super().__init__(f"Session '{name}' already exists")
        self.name = name


class SessionNotFoundError(ToolUsageError):
    """Raised when an operation names a session that is not open."""

    def __init__(self, name: str, available: Optional[List[str]] = None):
        super().__init__(f"Session '{name}' not found")
        self.name = name
        self.available = list(available or [])

    def to_dict(self):
        return {"error": self.message, "available_sessions": self.available}


class ElementNotFoundError(BrowserMCPError):
    """Raised when a selector matches nothing and the operation needs a match."""

    def __init__(self, selector: str):
        super().__init__(f"Element not found: {selector}")
        self.selector = selector


class CollaboratorError(BrowserMCPError):
    """Raised when an external collaborator (assertion, vision) fails."""

    def __init__(self, collaborator: str, message: str, **context):
        super().__init__(message, collaborator=collaborator, **context)
        self.collaborator = collaborator

    def to_dict(self):
        return {"error": self.message, "collaborator": self.collaborator}
