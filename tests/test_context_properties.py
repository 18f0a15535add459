"""
Tests for ambient resolver access.
"""

import pytest

from domain_localization import context
from domain_localization.cache import SnapshotCache
from domain_localization.exceptions import ResolverNotInitialized
from domain_localization.repository import InMemoryRepository
from domain_localization.resolver import LocaleResolver


class TestAmbientResolver:
    """A scoped resolver SHALL win over the default, and only inside its block."""

    def test_missing_resolver_raises(self) -> None:
        assert context.find_resolver() is None

        with pytest.raises(ResolverNotInitialized) as exc_info:
            context.get_resolver()

        assert exc_info.value.code == "resolver_not_initialized"

    def test_scoped_resolver(self, resolver: LocaleResolver) -> None:
        with context.use_resolver(resolver) as active:
            assert active is resolver
            assert context.get_resolver() is resolver

        assert context.find_resolver() is None

    def test_scope_is_reset_on_error(self, resolver: LocaleResolver) -> None:
        with pytest.raises(RuntimeError):
            with context.use_resolver(resolver):
                raise RuntimeError("request failed")

        assert context.find_resolver() is None

    def test_default_resolver(self, repository: InMemoryRepository, resolver: LocaleResolver) -> None:
        background = LocaleResolver.for_background(repository, SnapshotCache())
        context.set_default_resolver(background)

        assert context.get_resolver() is background
        with context.use_resolver(resolver):
            assert context.get_resolver() is resolver
        assert context.get_resolver() is background

    def test_nested_scopes(self, repository: InMemoryRepository, resolver: LocaleResolver) -> None:
        inner = LocaleResolver(repository, SnapshotCache())

        with context.use_resolver(resolver):
            with context.use_resolver(inner):
                assert context.get_resolver() is inner
            assert context.get_resolver() is resolver


class TestCurrentLocale:
    """Locale lookups through the ambient resolver."""

    def test_current_locale(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://b.cz/")

        with context.use_resolver(resolver):
            assert context.current_locale() == "cs"

    def test_current_locale_uses_context_fallback(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://unknown.org/")
        resolver.set_context_locale("en")

        with context.use_resolver(resolver):
            assert context.current_locale() == "en"

    def test_background_default(self, repository: InMemoryRepository) -> None:
        context.set_default_resolver(LocaleResolver.for_background(repository, SnapshotCache()))

        assert context.current_locale() == "en"

    def test_fallback_locales_without_resolver(self) -> None:
        assert context.current_fallback_locales() == {}

    def test_fallback_locales(self, repository: InMemoryRepository) -> None:
        resolver = LocaleResolver(
            repository,
            SnapshotCache(),
            fallback_policy=lambda available: {"sk": ["cs", "en"]},
        )

        with context.use_resolver(resolver):
            assert context.current_fallback_locales() == {"sk": ("cs", "en")}
