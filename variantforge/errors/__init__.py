"""variantforge error handling.

Custom exception hierarchy with error codes and structured context.
"""

from variantforge.errors.base import (
    ArtifactWriteError,
    ConfigurationError,
    DuplicateTestNameError,
    ErrorCode,
    ErrorContext,
    OutputConflictError,
    ProviderError,
    ProviderLoadError,
    VariantForgeError,
)

__all__ = [
    "VariantForgeError",
    "ErrorCode",
    "ErrorContext",
    "ConfigurationError",
    "OutputConflictError",
    "ArtifactWriteError",
    "ProviderError",
    "ProviderLoadError",
    "DuplicateTestNameError",
]
