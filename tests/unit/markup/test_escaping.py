"""Tests for the escaping primitives."""
from __future__ import annotations

import logging

import pytest
from markupsafe import Markup

from safemarkup.core.markup import (
    SafeStringRegistry,
    check_plain,
    escape_html,
    filter_bad_protocol,
    strip_dangerous_protocols,
)


class TestEscapeHtml:
    """escape_html() encoding, validation and self-registration."""

    def test_encodes_the_five_significant_characters(self) -> None:
        assert escape_html("<a href=\"x\">Tom & 'Jerry'</a>") == (
            "&lt;a href=&#34;x&#34;&gt;Tom &amp; &#39;Jerry&#39;&lt;/a&gt;"
        )

    @pytest.mark.parametrize("text", ["", "plain text", "café ünïcode", "100% @home: ok!", "a\nb\tc"])
    def test_text_without_significant_characters_is_unchanged(self, text: str) -> None:
        assert escape_html(text) == text

    def test_result_is_registered_as_html_safe(self, registry: SafeStringRegistry) -> None:
        """The escaped output is known safe immediately after escaping."""
        escaped = escape_html("<script>", registry)
        assert escaped == "&lt;script&gt;"
        assert registry.is_safe(escaped, "html") is True
        assert registry.is_safe(escaped, "all") is False

    def test_raw_input_is_not_registered(self, registry: SafeStringRegistry) -> None:
        escape_html("<script>", registry)
        assert registry.is_safe("<script>") is False

    def test_returns_plain_str(self) -> None:
        assert type(escape_html("<")) is str

    def test_trusted_markup_is_still_escaped(self) -> None:
        """Escaping is unconditional; pass-through is the formatter's job."""
        assert escape_html(Markup("<b>")) == "&lt;b&gt;"

    def test_numbers_are_stringified(self) -> None:
        assert escape_html(3.5) == "3.5"
        assert escape_html(True) == "True"

    def test_valid_bytes_are_decoded(self) -> None:
        assert escape_html("é<".encode("utf-8")) == "é&lt;"

    def test_invalid_bytes_yield_empty_string(self, registry: SafeStringRegistry, caplog: pytest.LogCaptureFixture) -> None:
        """Malformed input is dropped rather than partially escaped."""
        with caplog.at_level(logging.WARNING, logger="safemarkup"):
            assert escape_html(b"ok \xff<script>", registry) == ""
        assert "not valid utf-8" in caplog.text
        assert len(registry) == 0

    def test_lone_surrogate_yields_empty_string(self) -> None:
        assert escape_html("bad \ud800 text") == ""

    def test_charset_is_enforced(self) -> None:
        """Text the charset cannot represent is rejected."""
        assert escape_html("café", charset="ascii") == ""
        assert escape_html("cafe<", charset="ascii") == "cafe&lt;"

    def test_check_plain_registers(self, registry: SafeStringRegistry) -> None:
        out = check_plain("a > b", registry)
        assert out == "a &gt; b"
        assert out in registry


class TestStripDangerousProtocols:
    """strip_dangerous_protocols() scheme filtering."""

    @pytest.mark.parametrize(
        "uri",
        [
            "http://example.com/",
            "https://example.com/path?q=1#frag",
            "mailto:someone@example.com",
            "/relative/path",
            "?query=a:b",
            "#fragment:x",
            "relative/path:with-colon",
            "",
        ],
    )
    def test_allowed_and_schemeless_values_are_unchanged(self, uri: str) -> None:
        assert strip_dangerous_protocols(uri) == uri

    @pytest.mark.parametrize(
        ("uri", "expected"),
        [
            ("javascript:alert(1)", "alert(1)"),
            ("JavaScript:alert(1)", "alert(1)"),
            ("vbscript:msgbox", "msgbox"),
            ("data:text/html;base64,xx", "text/html;base64,xx"),
            ("javascript:javascript:alert(1)", "alert(1)"),
            ("javascript:http://ok", "http://ok"),
        ],
    )
    def test_dangerous_schemes_are_removed(self, uri: str, expected: str) -> None:
        assert strip_dangerous_protocols(uri) == expected

    def test_leading_colon_is_kept(self) -> None:
        """A colon at position zero has no scheme in front of it."""
        assert strip_dangerous_protocols(":foo") == ":foo"

    def test_custom_allow_list(self) -> None:
        assert strip_dangerous_protocols("gopher:x", ["gopher"]) == "gopher:x"
        assert strip_dangerous_protocols("http://x", ["gopher"]) == "//x"

    def test_does_not_escape(self) -> None:
        assert strip_dangerous_protocols("http://x/?a=<b>") == "http://x/?a=<b>"


class TestFilterBadProtocol:
    """filter_bad_protocol() for already-encoded attribute values."""

    def test_encoded_scheme_is_decoded_then_stripped(self) -> None:
        assert filter_bad_protocol("javascript&#58;alert(1)") == "alert(1)"

    def test_result_is_escaped_and_registered(self, registry: SafeStringRegistry) -> None:
        out = filter_bad_protocol("http://x/?a=1&amp;b=<2>", registry)
        assert out == "http://x/?a=1&amp;b=&lt;2&gt;"
        assert registry.is_safe(out) is True
