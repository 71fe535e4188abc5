"""Tests for the Criteria fluent builder."""

import math

import pytest

from esodm.core.criteria import Criteria, CriteriaEntry, JoinType, OperationKey, where


class TestChainBuilding:
    """Test chain structure produced by the builder."""

    def test_where_starts_a_chain(self):
        node = where("title")
        assert node.field == "title"
        assert node.join_type is JoinType.AND
        assert node.criteria_chain == (node,)
        assert Criteria.where("title").field == "title"

    def test_and_or_append_nodes(self):
        chain = where("a").eq(1).and_("b").eq(2).or_("c").eq(3)
        nodes = chain.criteria_chain
        assert [node.field for node in nodes] == ["a", "b", "c"]
        assert [node.join_type for node in nodes] == [JoinType.AND, JoinType.AND, JoinType.OR]
        assert nodes[2].is_or
        assert nodes[1].is_and

    def test_earlier_chain_not_changed(self):
        """Appending a node never alters a chain built earlier."""
        first = where("a").eq(1)
        second = first.and_("b")
        assert first.criteria_chain == (first,)
        assert second.criteria_chain == (first, second)

    def test_chain_is_read_only(self):
        chain = where("a").eq(1).criteria_chain
        assert isinstance(chain, tuple)

    def test_append_criteria_copies_node(self):
        other = where("tag").eq("x").not_().boost(2.0)
        node = where("a").eq(1).or_(other)
        assert node.field == "tag"
        assert node.is_or
        assert node.negated
        assert node.boost_value == 2.0
        assert node.entries == other.entries

    def test_append_invalid_type(self):
        with pytest.raises(TypeError):
            where("a").and_(42)


class TestEntries:
    """Test entries added by builder methods."""

    def test_entries_in_order(self):
        node = where("age").gte(18).lt(65)
        assert node.entries == (
            CriteriaEntry(OperationKey.GREATER_EQUAL, 18),
            CriteriaEntry(OperationKey.LESS, 65),
        )

    @pytest.mark.parametrize(
        ("method", "key"),
        [
            ("eq", OperationKey.EQUALS),
            ("contains", OperationKey.CONTAINS),
            ("startswith", OperationKey.STARTS_WITH),
            ("endswith", OperationKey.ENDS_WITH),
            ("expression", OperationKey.EXPRESSION),
            ("fuzzy", OperationKey.FUZZY),
        ],
    )
    def test_scalar_operations(self, method, key):
        node = getattr(where("f"), method)("value")
        assert node.entries == (CriteriaEntry(key, "value"),)

    def test_between_stores_pair(self):
        node = where("year").between(2000, None)
        assert node.entries == (CriteriaEntry(OperationKey.BETWEEN, (2000, None)),)

    def test_in_stores_list(self):
        node = where("tag").in_(("a", "b"))
        assert node.entries[0].value == ["a", "b"]
        assert where("tag").not_in({"a"}).entries[0].key is OperationKey.NOT_IN

    def test_null_operand_accepted_for_eq(self):
        """A None operand is recorded; it compiles to no clause."""
        assert where("a").eq(None).entries[0].value is None


class TestBuilderValidation:
    """Test builder-level validation."""

    def test_between_both_none(self):
        with pytest.raises(ValueError, match=r"\[\* TO \*\]"):
            where("year").between(None, None)

    @pytest.mark.parametrize("method", ["lt", "lte", "gt", "gte"])
    def test_single_sided_none(self, method):
        with pytest.raises(ValueError, match="must not be None"):
            getattr(where("x"), method)(None)

    @pytest.mark.parametrize("method", ["contains", "startswith", "endswith"])
    def test_blank_in_wildcard(self, method):
        with pytest.raises(ValueError, match="Cannot construct query"):
            getattr(where("title"), method)("two words")

    def test_in_none(self):
        with pytest.raises(ValueError, match="must not be None"):
            where("tag").in_(None)

    def test_in_empty(self):
        with pytest.raises(ValueError, match="At least one"):
            where("tag").in_([])

    def test_in_string_rejected(self):
        with pytest.raises(TypeError):
            where("tag").in_("abc")


class TestBoostAndNegation:
    """Test boost and not_."""

    def test_boost_unset_by_default(self):
        assert where("a").boost_value is None

    def test_boost_set(self):
        assert where("a").boost(1.5).boost_value == 1.5

    def test_nan_boost_is_unset(self):
        assert where("a").boost(math.nan).boost_value is None

    def test_negative_boost(self):
        with pytest.raises(ValueError, match="must not be negative"):
            where("a").boost(-1)

    def test_not(self):
        node = where("a").eq(1)
        assert not node.negated
        assert node.not_().negated
