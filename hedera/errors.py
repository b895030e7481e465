"""Error types for Hedera.

Every failure that can be traced to a single source file is a BuildError
carrying that file's path, so the CLI can report it and the dev server can
log it without losing context.
"""

from __future__ import annotations

from pathlib import Path


class ConfigError(Exception):
    """Configuration file is missing, unreadable or malformed."""


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class FrontMatterError(BuildError):
    """Front-matter block could not be parsed into a mapping."""


class TemplateRenderError(BuildError):
    """Template syntax or runtime error while rendering a file."""


class LayoutError(BuildError):
    """Layout file is missing or the layout chain does not terminate."""


class ConversionError(BuildError):
    """External converter command failed to run or exited nonzero."""


class ContextTypeError(TypeError):
    """A context value does not have the type its reader requires."""
