"""
Exception hierarchy for fieldscope.

Only two conditions abort an index build (a spec with no components/schemas
section, and a spec with no endpoints). Everything else the builder finds is
recorded as a ValidationWarning and the build carries on.
"""


class FieldscopeError(Exception):
    """Base class for all fieldscope errors."""


class SpecLoadError(FieldscopeError):
    """
    Raised when a spec document cannot be read or decoded.

    Attributes:
        source: Path or label of the document.
        message: Human-readable cause.
    """

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


class FatalBuildError(FieldscopeError):
    """
    A structural defect that makes the spec unindexable.

    Returned inside an Err from build_index; the previously published index
    (if any) stays in place.
    """

    cause = "fatal build error"

    def __init__(self, message: str | None = None):
        self.message = message or self.cause
        super().__init__(self.message)


class NoComponentsSection(FatalBuildError):
    """The spec has no components/schemas section at all."""

    cause = "spec has no components/schemas section"


class NoEndpoints(FatalBuildError):
    """The spec declares no operations on any path."""

    cause = "spec declares no endpoints"


class FieldNotFoundError(FieldscopeError):
    """None of the requested fields exist in the index."""

    def __init__(self, names):
        self.names = list(names)
        super().__init__(f"Field(s) not found: {', '.join(self.names)}")
