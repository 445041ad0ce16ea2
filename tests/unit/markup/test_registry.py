"""Tests for SafeStringRegistry.

Covers capability-first safety checks, strategy subsumption, the additive
true-only write invariant, and export/import of trust state.
"""
from __future__ import annotations

import pytest
from markupsafe import Markup

from safemarkup.core.exceptions import UnknownStrategyError, UnsafeMarkingError
from safemarkup.core.markup import PlainText, SafeStringRecord, SafeStringRegistry, Strategy


class _Unstringable:
    """Trusted markup object that must never be cast to text."""

    def __html__(self) -> str:
        return "<b>ok</b>"

    def __str__(self) -> str:  # pragma: no cover - failing here is the test
        raise AssertionError("is_safe() stringified a trusted markup value")


class TestIsSafe:
    """Read-side behaviour of is_safe()."""

    def test_unknown_string_is_not_safe(self, registry: SafeStringRegistry) -> None:
        """Unregistered strings are untrusted by default."""
        assert registry.is_safe("<b>hi</b>") is False

    def test_trusted_markup_is_safe_without_registration(self, registry: SafeStringRegistry) -> None:
        """Markup values carry the capability and need no registry entry."""
        assert registry.is_safe(Markup("<b>hi</b>")) is True
        assert registry.is_safe(Markup("<b>hi</b>"), "all") is True
        assert len(registry) == 0

    def test_capability_checked_before_stringification(self, registry: SafeStringRegistry) -> None:
        """Objects implementing __html__ are never cast to str."""
        assert registry.is_safe(_Unstringable()) is True

    def test_plain_text_tag_never_counts_as_capability(self, registry: SafeStringRegistry) -> None:
        """PlainText is looked up by content like any other string."""
        assert registry.is_safe(PlainText("<i>x</i>")) is False
        registry.mark_safe("<i>x</i>")
        assert registry.is_safe(PlainText("<i>x</i>")) is True

    def test_lookup_is_by_content(self, registry: SafeStringRegistry) -> None:
        """Equal strings built separately share safety."""
        registry.mark_safe("<p>" + "x" + "</p>")
        assert registry.is_safe("".join(["<p>", "x", "</p>"])) is True

    def test_numbers_are_looked_up_by_text(self, registry: SafeStringRegistry) -> None:
        """Non-string values are stringified for the lookup."""
        registry.mark_safe("42")
        assert registry.is_safe(42) is True

    def test_none_is_never_safe(self, registry: SafeStringRegistry) -> None:
        assert registry.is_safe(None) is False

    def test_is_safe_is_a_pure_read(self, registry: SafeStringRegistry) -> None:
        """Repeated checks give the same answer and do not write."""
        registry.mark_safe("a")
        first = (registry.is_safe("a"), registry.is_safe("b"))
        second = (registry.is_safe("a"), registry.is_safe("b"))
        assert first == second == (True, False)
        assert len(registry) == 1

    def test_membership_uses_default_strategy(self, registry: SafeStringRegistry) -> None:
        registry.mark_safe("x")
        assert "x" in registry
        assert "y" not in registry


class TestStrategies:
    """Strategy subsumption rules."""

    def test_all_implies_html(self, registry: SafeStringRegistry) -> None:
        """A value safe under 'all' is safe under every strategy."""
        registry.mark_safe("v", Strategy.ALL)
        assert registry.is_safe("v", "html") is True
        assert registry.is_safe("v", "all") is True

    def test_html_does_not_imply_all(self, registry: SafeStringRegistry) -> None:
        """A value safe only under 'html' is not safe under 'all'."""
        registry.mark_safe("v", "html")
        assert registry.is_safe("v", "html") is True
        assert registry.is_safe("v", "all") is False

    def test_unknown_strategy_is_a_programming_error(self, registry: SafeStringRegistry) -> None:
        with pytest.raises(UnknownStrategyError):
            registry.is_safe("v", "css")
        with pytest.raises(UnknownStrategyError):
            registry.mark_safe("v", "js")

    def test_default_strategy_is_configurable(self) -> None:
        """A registry created for 'all' marks and checks under 'all' by default."""
        registry = SafeStringRegistry(default_strategy="all")
        registry.mark_safe("v")
        assert registry.is_safe("v", "all") is True


class TestMarkSafe:
    """Write-side invariants."""

    @pytest.mark.parametrize("marking", [False, None, 0, 1, "true", "TRUE"])
    def test_non_true_marking_fails_fast(self, registry: SafeStringRegistry, marking: object) -> None:
        """Only the literal True is accepted, and nothing is written otherwise."""
        with pytest.raises(UnsafeMarkingError):
            registry.mark_safe("v", "html", marking)
        assert registry.is_safe("v") is False
        assert len(registry) == 0

    def test_marks_are_additive(self, registry: SafeStringRegistry) -> None:
        """Marking under a second strategy keeps the first."""
        registry.mark_safe("v", "html")
        registry.mark_safe("v", "all")
        assert registry.get_all() == {"v": {"html": True, "all": True}}

    def test_marking_error_is_a_value_error(self, registry: SafeStringRegistry) -> None:
        with pytest.raises(ValueError, match="Only the value True"):
            registry.mark_safe("v", marking=False)

    def test_trusted_markup_is_registered_by_content(self, registry: SafeStringRegistry) -> None:
        registry.mark_safe(Markup("<b>x</b>"))
        assert registry.is_safe("<b>x</b>") is True


class TestSetMultiple:
    """Bulk marking in the get_all() mapping form."""

    def test_set_multiple_adds_entries(self, registry: SafeStringRegistry) -> None:
        registry.set_multiple({"a": {"html": True}, "b": {"all": True}})
        assert registry.is_safe("a") is True
        assert registry.is_safe("b", "all") is True

    def test_set_multiple_is_all_or_nothing(self, registry: SafeStringRegistry) -> None:
        """One bad marking rejects the whole batch."""
        with pytest.raises(UnsafeMarkingError):
            registry.set_multiple({"a": {"html": True}, "b": {"html": False}})
        assert registry.is_safe("a") is False
        assert len(registry) == 0


class TestExportImport:
    """Trust state handoff between units of work."""

    def test_export_is_complete_and_ordered(self, registry: SafeStringRegistry) -> None:
        registry.mark_safe("first")
        registry.mark_safe("second", "all")
        registry.mark_safe("first", "all")
        records = registry.export_all()
        assert [r.value for r in records] == ["first", "second"]
        assert records[0].markings == {"html": True, "all": True}
        assert records[1].as_pair() == ("second", {"all": True})

    def test_round_trip_preserves_every_answer(self, registry: SafeStringRegistry) -> None:
        """importAll(exportAll()) reproduces is_safe() for every value."""
        registry.mark_safe("h", "html")
        registry.mark_safe("a", "all")
        registry.mark_safe("both", "html")
        registry.mark_safe("both", "all")

        target = SafeStringRegistry()
        target.import_all(registry.export_all())

        for value in ("h", "a", "both", "missing"):
            for strategy in ("html", "all"):
                assert target.is_safe(value, strategy) == registry.is_safe(value, strategy)

    def test_import_is_a_union(self, registry: SafeStringRegistry) -> None:
        registry.mark_safe("existing")
        registry.import_all([("imported", {"html": True})])
        assert registry.is_safe("existing") is True
        assert registry.is_safe("imported") is True

    def test_import_accepts_mapping_form(self, registry: SafeStringRegistry) -> None:
        registry.import_all({"x": {"all": True}})
        assert registry.is_safe("x", "all") is True

    def test_import_rejects_non_true_marking(self, registry: SafeStringRegistry) -> None:
        """A tampered snapshot is refused before anything is written."""
        with pytest.raises(UnsafeMarkingError):
            registry.import_all([("ok", {"html": True}), ("bad", {"html": 1})])
        assert len(registry) == 0

    def test_import_accepts_records(self, registry: SafeStringRegistry) -> None:
        registry.import_all([SafeStringRecord("r", frozenset({Strategy.HTML}))])
        assert registry.is_safe("r") is True

    def test_copy_is_independent(self, registry: SafeStringRegistry) -> None:
        """Forked registries share no state after the copy."""
        registry.mark_safe("shared")
        clone = registry.copy()
        clone.mark_safe("only-clone")
        registry.mark_safe("only-original")
        assert clone.is_safe("shared") is True
        assert registry.is_safe("only-clone") is False
        assert clone.is_safe("only-original") is False

    def test_clear_starts_a_new_unit_of_work(self, registry: SafeStringRegistry) -> None:
        registry.mark_safe("x")
        registry.clear()
        assert registry.is_safe("x") is False
        assert registry.export_all() == []
