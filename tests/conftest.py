"""Shared fixtures: a small two-locale site served from four domains."""

import pytest

from domain_localization import context
from domain_localization.cache import SnapshotCache
from domain_localization.enums import Environment
from domain_localization.models import DomainRecord, LocaleRecord
from domain_localization.repository import InMemoryRepository
from domain_localization.resolver import LocaleResolver


class FakeTimer:
    """Manually advanced clock for TTL tests."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_repository() -> InMemoryRepository:
    en = LocaleRecord("en", is_default=True, position=1, site_name="Example", title_separator="|")
    cs = LocaleRecord("cs", position=2, site_name="Příklad", title_suffix="CZ")
    return InMemoryRepository(
        locales=[en, cs],
        domains=[
            DomainRecord("a.com", en, Environment.PRODUCTION, https=True, is_default=True),
            DomainRecord("b.cz", cs, Environment.PRODUCTION, https=True, use_www=True),
            DomainRecord("beta.a.com", en, Environment.BETA, protected=True),
            DomainRecord("localhost", en, Environment.LOCALHOST),
        ],
    )


@pytest.fixture
def repository() -> InMemoryRepository:
    return make_repository()


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def cache(timer: FakeTimer) -> SnapshotCache:
    return SnapshotCache(timer=timer)


@pytest.fixture
def resolver(repository: InMemoryRepository, cache: SnapshotCache) -> LocaleResolver:
    return LocaleResolver(repository, cache)


@pytest.fixture(autouse=True)
def reset_default_resolver():
    context.set_default_resolver(None)
    yield
    context.set_default_resolver(None)
