"""
Property-based tests for hostname validation.

Uses Hypothesis to verify that registered hostnames are stored in their
canonical form (lowercase, IDNA-encoded, without "www.") and that malformed
hostnames are rejected with a structured error.
"""

import string

import idna
import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from domain_localization.domain_validator import (
    DomainValidator,
    MAX_DOMAIN_LENGTH,
    strip_www,
)
from domain_localization.enums import DomainValidationErrorCode
from domain_localization.exceptions import ValidationError


TLDS = ["de", "com", "net", "org", "eu", "cz", "travel"]


def valid_ascii_label() -> st.SearchStrategy[str]:
    """Generate valid ASCII labels (no leading/trailing hyphens)."""
    alphanumeric = st.sampled_from(string.ascii_lowercase + string.digits)

    return st.one_of(
        alphanumeric,
        st.builds(
            lambda first, middle, last: first + middle + last,
            alphanumeric,
            st.text(
                alphabet=string.ascii_lowercase + string.digits + "-",
                min_size=0,
                max_size=10,
            ),
            alphanumeric,
        ),
    ).filter(lambda s: s != "www")


def valid_ascii_domain() -> st.SearchStrategy[str]:
    """Generate valid ASCII hostnames with one or more labels."""
    return st.builds(
        lambda labels, tld: ".".join(labels + [tld]),
        st.lists(valid_ascii_label(), min_size=1, max_size=3),
        st.sampled_from(TLDS),
    )


class TestCanonicalFormProperty:
    """
    *For any* valid hostname, validation SHALL succeed and produce the
    lowercase form without a "www." prefix.
    """

    @given(domain=valid_ascii_domain())
    @settings(max_examples=100)
    def test_ascii_domain_is_lowercased(self, domain: str) -> None:
        validator = DomainValidator()

        for variant in (domain, domain.upper(), domain.swapcase()):
            result = validator.validate(variant)
            assert result.valid, f"'{variant}' should be valid: {result.error}"
            assert result.canonical_domain == domain.lower()
            assert result.error is None

    @given(domain=valid_ascii_domain())
    @settings(max_examples=100)
    def test_www_prefix_is_stripped(self, domain: str) -> None:
        validator = DomainValidator()

        assert validator.validate("www." + domain).canonical_domain == domain
        assert validator.validate("WWW." + domain).canonical_domain == domain

    @given(domain=valid_ascii_domain())
    @settings(max_examples=100)
    def test_validation_is_idempotent(self, domain: str) -> None:
        validator = DomainValidator()

        once = validator.require_valid(domain)
        assert validator.require_valid(once) == once

    def test_localhost_is_accepted(self) -> None:
        validator = DomainValidator()

        assert validator.require_valid("localhost") == "localhost"
        assert validator.require_valid(" LOCALHOST ") == "localhost"

    @pytest.mark.parametrize(
        "raw, canonical",
        [
            ("bücher.de", "xn--bcher-kva.de"),
            ("BÜCHER.de", "xn--bcher-kva.de"),
            ("www.bücher.de", "xn--bcher-kva.de"),
            ("příklad.cz", idna.encode("příklad.cz", uts46=True).decode("ascii")),
        ],
    )
    def test_international_domain_is_idna_encoded(self, raw: str, canonical: str) -> None:
        result = DomainValidator().validate(raw)

        assert result.valid
        assert result.canonical_domain == canonical
        assert result.canonical_domain.isascii()

    def test_strip_www(self) -> None:
        assert strip_www("www.example.com") == "example.com"
        assert strip_www("WWW.example.com") == "example.com"
        assert strip_www("wwwexample.com") == "wwwexample.com"
        assert strip_www("example.com") == "example.com"


class TestRejectionProperty:
    """*For any* malformed hostname, validation SHALL fail with an error code."""

    FORBIDDEN_CHARS = [
        '\x00', '\x1f', ' ', '\t', '!', '@', '#', '$', '%', '&', '*', '(', ')',
        '+', '=', '[', ']', '{', '}', '|', '\\', ':', ';', '"', "'", '<', '>',
        ',', '?', '/', '`', '~', '_',
    ]

    @given(
        base_label=st.text(
            alphabet=string.ascii_lowercase + string.digits,
            min_size=1,
            max_size=10,
        ),
        forbidden_char=st.sampled_from(FORBIDDEN_CHARS),
        tld=st.sampled_from(TLDS),
    )
    @settings(max_examples=100)
    def test_forbidden_chars_cause_rejection(
        self, base_label: str, forbidden_char: str, tld: str
    ) -> None:
        mid = len(base_label) // 2
        label = base_label[:mid] + forbidden_char + base_label[mid:] + "a"
        domain = f"{label}.{tld}"

        result = DomainValidator().validate(domain)

        assert not result.valid, f"{domain!r} should be rejected"
        assert result.error.code == DomainValidationErrorCode.INVALID_FORMAT

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_input(self, raw) -> None:
        result = DomainValidator().validate(raw)

        assert not result.valid
        assert result.canonical_domain is None
        assert result.error.code == DomainValidationErrorCode.EMPTY_INPUT

    @pytest.mark.parametrize(
        "raw",
        [
            "example",
            "-example.com",
            "example-.com",
            "example.c",
            "example.toolongtld",
            "example.c0m",
            "exa..mple.com",
            ".example.com",
            "www.com",
        ],
    )
    def test_invalid_format(self, raw: str) -> None:
        result = DomainValidator().validate(raw)

        assert not result.valid
        assert result.error.code == DomainValidationErrorCode.INVALID_FORMAT

    @given(label_count=st.integers(min_value=5, max_value=8))
    @settings(max_examples=10)
    def test_too_long_domain(self, label_count: int) -> None:
        domain = ".".join(["a" * 63] * label_count) + ".com"
        assume(len(domain) > MAX_DOMAIN_LENGTH)

        result = DomainValidator().validate(domain)

        assert not result.valid
        assert result.error.code == DomainValidationErrorCode.TOO_LONG
        assert result.error.details["length"] == len(domain)

    def test_require_valid_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            DomainValidator().require_valid("not a domain")

        assert exc_info.value.code == DomainValidationErrorCode.INVALID_FORMAT.value
        assert "not a domain" in exc_info.value.message
