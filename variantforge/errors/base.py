"""Custom exception hierarchy for variantforge.

Every failure while generating variants is fatal: a half-expanded
combination tree has no safe recovery, so nothing here is retried.
All errors inherit from VariantForgeError and include:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with the variant path / test name / output path
- suggestions: List of actionable steps to resolve the issue

Example:
    try:
        writer.write_test_variants(input_tests=tests, variant_providers=[...], output_dir="out")
    except OutputConflictError as e:
        print(f"Error: {e}")
        print(f"Suggestions: {e.suggestions}")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for variantforge.

    Error codes are organized by category:
    - E1xx: Configuration errors
    - E2xx: Output errors
    - E3xx: Variant provider errors
    - E4xx: Test registry errors
    - E9xx: Unknown/internal errors
    """

    # Configuration errors (E1xx)
    INVALID_CONFIG = "E101"
    MISSING_ARGUMENT = "E102"
    UNKNOWN_ARGUMENT = "E103"

    # Output errors (E2xx)
    OUTPUT_CONFLICT = "E201"
    WRITE_FAILED = "E202"

    # Variant provider errors (E3xx)
    PROVIDER_FAILED = "E301"
    PROVIDER_LOAD_FAILED = "E302"

    # Test registry errors (E4xx)
    DUPLICATE_TEST = "E401"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "configuration"
        elif code_num < 300:
            return "output"
        elif code_num < 400:
            return "provider"
        elif code_num < 500:
            return "registry"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Where in a generation run an error occurred.

    Attributes:
        variant_path: Variant names traversed from the root to the failing node
        test_name: Name of the test entry being handled
        output_path: Filesystem path involved in the failure
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    variant_path: list[str] | None = None
    test_name: str | None = None
    output_path: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "variant_path": self.variant_path,
            "test_name": self.test_name,
            "output_path": self.output_path,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.variant_path is not None:
            parts.append(f"variant={'/'.join(self.variant_path) or '<root>'}")
        if self.test_name:
            parts.append(f"test={self.test_name}")
        if self.output_path:
            parts.append(f"file={self.output_path}")
        return " > ".join(parts) if parts else "unknown location"


class VariantForgeError(Exception):
    """Base exception for all variantforge errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with generation details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.cause is not None:
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(VariantForgeError):
    """A required argument is missing or an unknown one was given.

    Raised before any work begins.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check the keys in your variantforge.yaml",
        "Run 'variantforge plan' to preview the combinations without writing",
    ]

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        super().__init__(message=message, **kwargs)

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            base = f"{base} (field: {self.field})"
        return base

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        return result


class OutputConflictError(VariantForgeError):
    """The target directory or file already exists and may not be overwritten."""

    error_code = ErrorCode.OUTPUT_CONFLICT
    default_message = "Output already exists"
    default_suggestions = [
        "Delete the output directory left by a previous run",
        "Pass --allow-dir-overwrite / --allow-file-overwrite to reuse it",
    ]

    def __init__(self, path: str, message: str | None = None, **kwargs: Any) -> None:
        self.path = str(path)
        kwargs.setdefault("context", ErrorContext(output_path=self.path))
        super().__init__(message=message or f"{self.path} already exists", **kwargs)


class ArtifactWriteError(VariantForgeError):
    """Writing a generated test script failed."""

    error_code = ErrorCode.WRITE_FAILED
    default_message = "Failed to write test script"
    default_suggestions = [
        "Check permissions and free space on the output filesystem",
        "Treat the partially written output directory as invalid and delete it",
    ]


class ProviderError(VariantForgeError):
    """A variant provider failed; the whole run is aborted."""

    error_code = ErrorCode.PROVIDER_FAILED
    default_message = "Variant provider failed"
    default_suggestions = [
        "Fix the provider named in the traceback",
        "Run 'variantforge plan -v' to see which branch was being expanded",
    ]

    def __init__(
        self,
        message: str | None = None,
        variant_path: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> None:
        self.variant_path = list(variant_path) if variant_path is not None else None
        if self.variant_path is not None:
            kwargs.setdefault("context", ErrorContext(variant_path=self.variant_path))
        super().__init__(message=message, **kwargs)


class ProviderLoadError(ProviderError):
    """A provider namespace or object could not be imported."""

    error_code = ErrorCode.PROVIDER_LOAD_FAILED
    default_message = "Failed to load variant provider"
    default_suggestions = [
        "Check that the provider package is importable from this environment",
        "Run 'variantforge providers <namespace>' to list what is discovered",
    ]

    def __init__(
        self,
        provider_name: str,
        reason: str,
        cause: Exception | None = None,
        **kwargs: Any,
    ) -> None:
        self.provider_name = provider_name
        self.reason = reason
        message = f"Failed to load provider '{provider_name}': {reason}"
        if cause:
            message += f" (caused by: {cause})"
        super().__init__(message=message, cause=cause, **kwargs)


class DuplicateTestNameError(VariantForgeError):
    """Two test entries were registered under the same name."""

    error_code = ErrorCode.DUPLICATE_TEST
    default_message = "Duplicate test name"
    default_suggestions = [
        "Use test_prefix to keep names from different search paths apart",
        "Rename one of the conflicting test entries",
    ]

    def __init__(self, test_name: str, **kwargs: Any) -> None:
        self.test_name = test_name
        kwargs.setdefault("context", ErrorContext(test_name=test_name))
        super().__init__(
            message=f"Can't add test {test_name} because a test with that name exists",
            **kwargs,
        )
