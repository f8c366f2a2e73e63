"""variantforge - Variant test script generator.

variantforge takes a set of base test cases and an ordered list of variant
dimensions (drivers, locales, feature flags, ...) and writes one
standalone test script per test case for every combination of variants.
Each script starts with the environment, globals and imports its
combination selected.

Key Features:
    - Variant Tumbling: Depth-first cross product of ordered dimensions
    - Override-aware Context: Later settings shadow earlier ones
    - Payload Isolation: Each branch works on its own copy of the tests
    - Pruning: A dimension with no variants drops the branch
    - Provider Discovery: Namespaces, object paths and entry points

Example:
    >>> from variantforge import Context, VariantWriter
    >>>
    >>> # myproject/variants/driver/sqlite.py
    >>> def provider(path, context, payload, variants):
    ...     variants["sqlite"] = Context.new_env_var("DB_DRIVER", "sqlite")
    >>>
    >>> writer = VariantWriter()
    >>> tests = writer.find_input_test_modules(search_path=["myproject.testcases"])
    >>> result = writer.write_test_variants(
    ...     input_tests=tests,
    ...     variant_providers=["myproject.variants.driver"],
    ...     output_dir="t/generated",
    ... )

Core Models:
    Context: Ordered, nestable collection of settings
    EnvVar, GlobalVar, ModuleUse, MetaInfo: Settings rendered into scripts
    TestEntry: One base test case

Execution:
    Tumbler: Walks every combination of variants
    VariantProvider, ProviderGroup: Dimension building blocks
    VariantWriter: Writes the generated scripts

Configuration:
    GeneratorConfig: Settings for a generation run

Error Handling:
    VariantForgeError: Base exception for all variantforge errors
"""

from variantforge.combinatorial import ProviderGroup, Tumbler, VariantProvider, normalize_providers
from variantforge.config import GeneratorConfig, load_config
from variantforge.context import Context, EnvVar, GlobalVar, MetaInfo, ModuleUse, Setting
from variantforge.errors import (
    ArtifactWriteError,
    ConfigurationError,
    DuplicateTestNameError,
    OutputConflictError,
    ProviderError,
    ProviderLoadError,
    VariantForgeError,
)
from variantforge.plugins import ProviderLoader, get_registry, register_provider
from variantforge.writer import GenerationResult, TestEntry, VariantWriter

__version__ = "0.1.0"

__all__ = [
    # Context
    "Context",
    "Setting",
    "EnvVar",
    "GlobalVar",
    "ModuleUse",
    "MetaInfo",
    # Tumbling
    "Tumbler",
    "VariantProvider",
    "ProviderGroup",
    "normalize_providers",
    # Writing
    "TestEntry",
    "VariantWriter",
    "GenerationResult",
    # Providers
    "ProviderLoader",
    "get_registry",
    "register_provider",
    # Configuration
    "GeneratorConfig",
    "load_config",
    # Errors
    "VariantForgeError",
    "ConfigurationError",
    "OutputConflictError",
    "ArtifactWriteError",
    "ProviderError",
    "ProviderLoadError",
    "DuplicateTestNameError",
]
