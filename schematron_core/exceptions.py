"""
Exceptions
==========

Error taxonomy for Schematron template compilation.

Every failure inside the pipeline is raised as one of the specific errors
below and re-raised by the compiler as a single
SchematronConfigurationError, with the original error kept as its cause.
"""

from typing import Optional


COMPILE_TEMPLATE_STAGE = "compile-template"


class SchematronError(Exception):
    """Base exception for schematron_core failures."""


class ResourceNotFoundError(SchematronError):
    """A pipeline or included stylesheet could not be located."""

    def __init__(self, reference: str, root: Optional[str] = None):
        self.reference = reference
        self.root = root
        if root:
            message = f"Resource not found: {reference} (root: {root})"
        else:
            message = f"Resource not found: {reference}"
        super().__init__(message)


class StylesheetCompilationError(SchematronError):
    """A pipeline stylesheet is malformed or rejected by the XSLT engine."""

    def __init__(self, message: str, stage: str):
        self.stage = stage
        super().__init__(f"[{stage}] {message}")


class TransformationError(SchematronError):
    """A stage failed while applying its stylesheet to the current source."""

    def __init__(self, message: str, stage: str):
        self.stage = stage
        super().__init__(f"[{stage}] {message}")


class TemplateCompilationError(SchematronError):
    """The generated validation stylesheet could not be compiled."""

    stage = COMPILE_TEMPLATE_STAGE


class SchematronConfigurationError(SchematronError):
    """
    Uniform error raised when compiling Schematron rules fails.

    Attributes:
        stage: Name of the pipeline stage that failed, or None when the
            failure happened before any stage ran
        cause: The original exception (same as __cause__)
    """

    def __init__(self, cause: BaseException, stage: Optional[str] = None):
        self.stage = stage
        location = f" at stage '{stage}'" if stage else ""
        super().__init__(f"Schematron compilation failed{location}: {cause}")
        self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__
