"""
Ambient access to the active resolver.

Code that has no direct handle on the request, such as translated values
stored on entities, can find the resolver here. A request installs its
resolver with use_resolver() for the duration of the request; code running
outside any request falls back to the process default installed with
set_default_resolver(), normally a background resolver.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping, Optional

from .exceptions import ResolverNotInitialized
from .resolver import LocaleResolver


_current: ContextVar[Optional[LocaleResolver]] = ContextVar(
    "domain_localization_resolver", default=None
)
_default: Optional[LocaleResolver] = None


def set_default_resolver(resolver: Optional[LocaleResolver]) -> None:
    """Install (or clear with None) the resolver used outside requests."""
    global _default
    _default = resolver


@contextmanager
def use_resolver(resolver: LocaleResolver) -> Iterator[LocaleResolver]:
    """Make resolver the active one within the block."""
    token = _current.set(resolver)
    try:
        yield resolver
    finally:
        _current.reset(token)


def find_resolver() -> Optional[LocaleResolver]:
    """Return the active resolver, or None when none is installed."""
    return _current.get() or _default


def get_resolver() -> LocaleResolver:
    """
    Return the active resolver.

    Raises:
        ResolverNotInitialized: If neither a scoped nor a default resolver exists
    """
    resolver = find_resolver()
    if resolver is None:
        raise ResolverNotInitialized(
            code="resolver_not_initialized",
            message=(
                "Localization resolver has not been defined. "
                "Use use_resolver() for requests or set_default_resolver() for background code."
            ),
        )
    return resolver


def current_locale(use_context_fallback: bool = True) -> str:
    """Effective locale of the active resolver."""
    return get_resolver().resolve_effective_locale(use_context_fallback)


def current_fallback_locales() -> Mapping[str, tuple[str, ...]]:
    """Fallback chains of the active resolver, empty when none is installed."""
    resolver = find_resolver()
    if resolver is None:
        return {}
    return resolver.fallback_locales()
