from __future__ import annotations

from typing import Optional


class StudyServerError(Exception):
    """Base class for errors raised by the dispatch layer."""


class DuplicateNameError(StudyServerError, ValueError):
    """A tool name or route key was registered twice."""


class UnknownToolError(StudyServerError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown tool '{self.name}'"


class ToolValidationError(StudyServerError, ValueError):
    """
    Tool arguments did not match the tool's input schema.

    `field` is the dotted path of the offending value (`<root>` when the
    violation is on the argument object itself) and `constraint` is the JSON
    Schema keyword that failed, e.g. `required`, `type` or `maximum`.
    """

    def __init__(self, field: str, constraint: str, message: str) -> None:
        super().__init__(f"Invalid argument '{field}' ({constraint}): {message}")
        self.field = field
        self.constraint = constraint
        self.message = message


class UpstreamError(StudyServerError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(StudyServerError):
    def __init__(self, method: str, path: str) -> None:
        super().__init__(f"No route for {method} {path}")
        self.method = method
        self.path = path
