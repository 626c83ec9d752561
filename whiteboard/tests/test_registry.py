"""Tests for the element registry and its audit log."""

import pytest

from whiteboard.context.audit import AuditAction, AuditLog
from whiteboard.context.registry import ElementRegistry, token_similarity
from whiteboard.dsl.schema import BoundingBox


class TestRegistration:
    """Tests for registering and looking up elements."""

    def test_register_then_find_returns_same_fields(self, registry: ElementRegistry):
        bbox = BoundingBox(x=10, y=20, width=300, height=40)
        element_id = registry.register_element(
            "text",
            content="Mitochondria",
            bbox=bbox,
            style={"color": "#fff"},
            description="the mitochondria label",
        )
        element = registry.find_element(element_id)
        assert element.type == "text"
        assert element.content == "Mitochondria"
        assert element.bbox == bbox
        assert element.style == {"color": "#fff"}
        assert element.description == "the mitochondria label"

    def test_generated_ids_are_unique(self, registry: ElementRegistry):
        ids = {registry.register_element("text", content=str(i)) for i in range(20)}
        assert len(ids) == 20
        assert all(i.startswith("elem_") for i in ids)

    def test_explicit_id_is_kept(self, registry: ElementRegistry):
        assert registry.register_element("circle", element_id="shape_7") == "shape_7"
        assert "shape_7" in registry

    def test_all_elements_in_registration_order(self, registry: ElementRegistry):
        first = registry.register_element("text", content="one")
        second = registry.register_element("circle")
        assert [e.id for e in registry.all_elements()] == [first, second]
        assert [e.id for e in registry.elements_by_type("circle")] == [second]

    def test_description_lookup_is_case_insensitive(self, registry: ElementRegistry):
        element_id = registry.register_element("text", description="Krebs Cycle")
        assert registry.find_element_by_description("  krebs cycle ").id == element_id

    def test_duplicate_description_last_wins(self, registry: ElementRegistry):
        registry.register_element("text", description="the answer")
        second = registry.register_element("text", description="the answer")
        assert registry.find_element_by_description("the answer").id == second

    def test_blank_description_finds_nothing(self, registry: ElementRegistry):
        registry.register_element("text", description="something")
        assert registry.find_element_by_description("   ") is None


class TestFuzzyMatching:
    """Tests for token-overlap matching."""

    def test_similarity_score(self):
        assert token_similarity("red circle", "the red circle") == pytest.approx(0.8)
        assert token_similarity("", "anything") == 0.0

    def test_similar_description_matches(self, registry: ElementRegistry):
        element_id = registry.register_element("circle", description="the big red circle")
        assert registry.find_element_by_description("big red circle").id == element_id

    def test_threshold_is_strict(self, registry: ElementRegistry):
        """A score of exactly 0.7 is not a match."""
        # 2 * 7 / (10 + 10) = 0.7
        words = "a b c d e f g h i j"
        registry.register_element("text", description=words)
        assert registry.find_similar_element("a b c d e f g x y z") is None

    def test_content_used_when_no_description(self, registry: ElementRegistry):
        element_id = registry.register_element("text", content="photosynthesis equation")
        assert registry.find_similar_element("the photosynthesis equation").id == element_id

    def test_tie_goes_to_earliest(self, registry: ElementRegistry):
        first = registry.register_element("text", description="light reaction")
        registry.register_element("text", description="light reaction")
        assert registry.find_similar_element("the light reaction").id == first

    def test_resolve_reference_falls_back_to_id(self, registry: ElementRegistry):
        element_id = registry.register_element("rectangle", element_id="shape_3")
        assert registry.resolve_reference("shape_3").id == element_id
        assert registry.resolve_reference(None) is None
        assert registry.resolve_reference("nothing like it") is None


class TestUpdatesAndRemoval:
    """Tests for update, removal and clear."""

    def test_update_reindexes_description(self, registry: ElementRegistry):
        element_id = registry.register_element("text", description="old name")
        registry.update_element(element_id, description="new name")
        assert registry.find_element_by_description("new name").id == element_id
        assert registry.find_element_by_description("old name") is None

    def test_update_unknown_field_raises(self, registry: ElementRegistry):
        element_id = registry.register_element("text")
        with pytest.raises(ValueError):
            registry.update_element(element_id, colour="red")

    def test_update_unknown_id_returns_none(self, registry: ElementRegistry):
        assert registry.update_element("missing", content="x") is None

    def test_remove_strips_edges_and_index(self, registry: ElementRegistry):
        a = registry.register_element("text", description="alpha")
        b = registry.register_element("text", description="beta")
        registry.add_relationship(a, b)

        assert registry.remove_element(a) is True
        assert registry.find_element(a) is None
        assert registry.find_element_by_description("alpha") is None
        assert a not in registry.connections(b)
        assert registry.remove_element(a) is False

    def test_clear_keeps_history(self, registry: ElementRegistry):
        registry.register_element("text", description="one")
        registry.clear()
        assert len(registry) == 0
        actions = [e.action for e in registry.get_history()]
        assert actions == [AuditAction.ELEMENT_REGISTERED, AuditAction.CONTEXT_CLEARED]


class TestRelationships:
    """Tests for the relationship graph."""

    def test_relationships_are_symmetric(self, registry: ElementRegistry):
        a = registry.register_element("text", content="a")
        b = registry.register_element("text", content="b")
        assert registry.add_relationship(a, b) is True
        assert registry.connections(a) == {b}
        assert registry.connections(b) == {a}
        assert [e.id for e in registry.get_relationships(a)] == [b]

    def test_relationship_requires_both_ends(self, registry: ElementRegistry):
        a = registry.register_element("text", content="a")
        assert registry.add_relationship(a, "ghost") is False
        assert registry.add_relationship(a, a) is False
        assert registry.connections(a) == set()

    def test_relationship_is_idempotent(self, registry: ElementRegistry):
        a = registry.register_element("text", content="a")
        b = registry.register_element("text", content="b")
        registry.add_relationship(a, b)
        registry.add_relationship(b, a)
        added = registry.audit.query(action=AuditAction.RELATIONSHIP_ADDED)
        assert len(added) == 1


class TestAuditLog:
    """Tests for the append-only audit log."""

    def test_query_filters_and_paginates(self):
        log = AuditLog()
        for i in range(5):
            log.log(AuditAction.ELEMENT_REGISTERED, element_id=f"e{i}")
        log.log(AuditAction.ELEMENT_REMOVED, element_id="e0")

        assert len(log) == 6
        assert len(log.query(action=AuditAction.ELEMENT_REGISTERED)) == 5
        assert [e["element_id"] for e in log.query(limit=2, offset=1)] == ["e1", "e2"]
        removed = log.query(element_id="e0", action=AuditAction.ELEMENT_REMOVED)
        assert removed[0]["action"] == "element.removed"
