"""Tests for provider registration and discovery."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from variantforge.combinatorial import VariantProvider
from variantforge.errors import ProviderLoadError
from variantforge.plugins import (
    ENTRY_POINT_GROUP,
    ProviderLoader,
    ProviderRegistry,
    get_registry,
    register_provider,
    reset_registry,
)


class Locales(VariantProvider):
    name = "locales"

    def provider(self, path, context, payload, variants):
        return {"en": None}


# =============================================================================
# Registry
# =============================================================================


class TestProviderRegistry:
    """Tests for the process-wide provider registry."""

    def test_registry_is_singleton(self) -> None:
        assert get_registry() is get_registry()
        assert ProviderRegistry() is get_registry()

    def test_register_and_get(self) -> None:
        registry = get_registry()
        provider = Locales()

        registry.register("locales", provider)

        assert "locales" in registry
        assert registry.get("locales") is provider
        assert registry.names() == ["locales"]
        assert len(registry) == 1

    def test_duplicate_registration_rejected(self) -> None:
        registry = get_registry()
        registry.register("locales", Locales())

        with pytest.raises(ValueError, match="already registered"):
            registry.register("locales", Locales())

    def test_unregister_and_clear(self) -> None:
        registry = get_registry()
        registry.register("a", Locales())
        registry.register("b", Locales())

        registry.unregister("a")
        assert registry.names() == ["b"]

        registry.clear()
        assert len(registry) == 0

    def test_get_missing_returns_none(self) -> None:
        assert get_registry().get("nope") is None

    def test_reset_drops_registrations(self) -> None:
        get_registry().register("locales", Locales())

        reset_registry()

        assert "locales" not in get_registry()

    def test_decorator_instantiates_class(self) -> None:
        @register_provider("decorated")
        class Decorated(VariantProvider):
            def provider(self, path, context, payload, variants):
                return {}

        assert isinstance(get_registry().get("decorated"), Decorated)

    def test_decorator_keeps_callable(self) -> None:
        @register_provider("fn")
        def dimension(path, context, payload):
            return {"x": None}

        assert get_registry().get("fn") is dimension


# =============================================================================
# Loader
# =============================================================================


class TestProviderLoader:
    """Tests for module discovery."""

    def test_iter_module_names_sorted_and_recursive(self) -> None:
        names = ProviderLoader().iter_module_names("sample_cases")

        assert names == ["sample_cases.basic", "sample_cases.more.extra"]

    def test_iter_module_names_does_not_import_leaves(self) -> None:
        import sys

        sys.modules.pop("sample_cases.basic", None)

        ProviderLoader().iter_module_names("sample_cases")

        assert "sample_cases.basic" not in sys.modules

    def test_iter_module_names_requires_package(self) -> None:
        with pytest.raises(ProviderLoadError, match="Not a package"):
            ProviderLoader().iter_module_names("sample_variants.driver.pg")

    def test_load_namespace_filters_providers(self) -> None:
        modules = ProviderLoader().load_namespace("sample_variants.driver")

        assert [m.__name__ for m in modules] == [
            "sample_variants.driver.pg",
            "sample_variants.driver.sqlite",
        ]

    def test_load_namespace_missing(self) -> None:
        with pytest.raises(ProviderLoadError) as exc_info:
            ProviderLoader().load_namespace("no_such_package_here")

        assert exc_info.value.provider_name == "no_such_package_here"
        assert exc_info.value.reason == "Module not found"

    def test_load_object_attribute_path(self) -> None:
        obj = ProviderLoader().load_object("sample_variants.driver.helpers:dsn")

        assert obj("pg") == "pg://localhost/test"

    def test_load_object_missing_attribute(self) -> None:
        with pytest.raises(ProviderLoadError, match="No attribute 'nope'"):
            ProviderLoader().load_object("sample_variants.driver.helpers:nope")

    def test_load_object_bad_spec(self) -> None:
        with pytest.raises(ProviderLoadError, match="Expected 'package.module:attribute'"):
            ProviderLoader().load_object("sample_variants.driver.helpers:")

    def test_load_object_instantiates_class(self) -> None:
        obj = ProviderLoader().load_object(f"{__name__}:Locales")

        assert isinstance(obj, Locales)

    def test_imports_cached(self) -> None:
        loader = ProviderLoader()

        with patch("variantforge.plugins.loader.importlib.import_module") as import_module:
            import_module.return_value = SimpleNamespace(__path__=[])
            loader.iter_module_names("cached_pkg")
            loader.iter_module_names("cached_pkg")

        assert import_module.call_count == 1


class TestEntryPoints:
    """Tests for installable providers."""

    def _entry_point(self, name: str, obj: object) -> MagicMock:
        ep = MagicMock()
        ep.name = name
        ep.value = f"pkg.module:{name}"
        ep.load.return_value = obj
        return ep

    def test_entry_points_registered(self) -> None:
        eps = [self._entry_point("zeta", Locales), self._entry_point("alpha", Locales())]

        with patch("variantforge.plugins.loader.entry_points", return_value=eps) as mock_eps:
            names = ProviderLoader().discover_entry_points()

        mock_eps.assert_called_once_with(group=ENTRY_POINT_GROUP)
        assert names == ["alpha", "zeta"]
        assert isinstance(get_registry().get("zeta"), Locales)

    def test_already_registered_names_kept(self) -> None:
        existing = Locales()
        get_registry().register("alpha", existing)

        with patch(
            "variantforge.plugins.loader.entry_points",
            return_value=[self._entry_point("alpha", Locales())],
        ):
            ProviderLoader().discover_entry_points()

        assert get_registry().get("alpha") is existing

    def test_broken_entry_point_fails(self) -> None:
        ep = self._entry_point("broken", None)
        ep.load.side_effect = ImportError("missing dependency")

        with patch("variantforge.plugins.loader.entry_points", return_value=[ep]):
            with pytest.raises(ProviderLoadError, match="Failed to load entry point"):
                ProviderLoader().discover_entry_points()
