"""Tests for relocation rules and rule sets."""

import pydantic
import pytest

from hoist.domain.relocation import RelocationRule, RelocationSet


class TestRelocationRule:
    """Test rule validation and path forms."""

    def test_accepts_aliases(self):
        """Manifest-style from/to keys populate the rule."""
        rule = RelocationRule.model_validate(
            {"from": "com.google.gson", "to": "myapp.libs.gson"}
        )

        assert rule.from_prefix == "com.google.gson"
        assert rule.to_path == "myapp/libs/gson"
        assert rule.from_path == "com/google/gson"

    def test_strips_surrounding_dots(self):
        """Trailing dots are not part of the namespace."""
        rule = RelocationRule(from_prefix="com.example.", to_prefix="shaded.example")

        assert rule.from_prefix == "com.example"

    @pytest.mark.parametrize("prefix", ["", "com..example", "com/example", "1com", "cöm"])
    def test_invalid_namespaces(self, prefix):
        """Only dotted ASCII identifiers are namespaces."""
        with pytest.raises(pydantic.ValidationError):
            RelocationRule(from_prefix=prefix, to_prefix="shaded")


class TestRelocationSet:
    """Test the stable set identifier."""

    def test_identifier_is_stable(self):
        """Equal rule lists give equal identifiers."""
        first = RelocationSet(rules=(RelocationRule(from_prefix="a.b", to_prefix="c.d"),))
        second = RelocationSet(rules=(RelocationRule(from_prefix="a.b", to_prefix="c.d"),))

        assert first.identifier == second.identifier
        assert len(first.identifier) == 64

    def test_order_matters(self):
        """Reordering rules gives a different set."""
        one = RelocationRule(from_prefix="a", to_prefix="x.a")
        two = RelocationRule(from_prefix="b", to_prefix="x.b")

        assert (
            RelocationSet(rules=(one, two)).identifier
            != RelocationSet(rules=(two, one)).identifier
        )

    def test_empty_set_is_falsy(self):
        """An empty set means no relocation."""
        assert not RelocationSet()
        assert len(RelocationSet()) == 0
