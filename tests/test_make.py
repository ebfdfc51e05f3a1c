"""
Tests for Entity.make - canon resolution and property ingestion.
"""

import pytest

from entcanon.canon import Canon
from entcanon.entity import Entity, make_entity
from entcanon.errors import InvalidCanonError


class TestPositionalCanon:
    """Positional arguments fill the canon from the right."""

    def test_name_only(self, root):
        assert root.make("n").canon == Canon(name="n")

    def test_base_and_name(self, root):
        assert root.make("b", "n").canon == Canon(base="b", name="n")

    def test_zone_base_name(self, root):
        assert root.make("z", "b", "n").canon == Canon("z", "b", "n")

    def test_zone_and_base_with_absent_name(self, root):
        assert root.make("z", "b", None).canon == Canon(zone="z", base="b")

    def test_name_string_embeds_zone_and_base(self, root):
        assert root.make("z/b/n").canon == Canon("z", "b", "n")
        assert root.make("b/n").canon == Canon(base="b", name="n")

    def test_empty_string_is_absent(self, zbn):
        assert zbn.make("", "b2", "n2").canon == Canon("z", "b2", "n2")

    def test_invalid_name_string_raises(self, root):
        with pytest.raises(InvalidCanonError):
            root.make("not a canon")


class TestInheritance:
    """Omitted parts come from the calling entity."""

    def test_sibling_by_name(self, zbn):
        assert zbn.make("n2").canon == Canon("z", "b", "n2")

    def test_no_args_copies_canon(self, zbn):
        assert zbn.make().canon == Canon("z", "b", "n")

    def test_base_and_name_keep_zone(self, zbn):
        assert zbn.make("b2", "n2").canon == Canon("z", "b2", "n2")

    def test_props_only_keeps_canon(self, zbn):
        ent = zbn.make({"a": 1})
        assert ent.canon == Canon("z", "b", "n")
        assert ent.a == 1


class TestCanonOverrides:
    """Control fields in the properties."""

    def test_entity_string_overrides(self, zbn):
        ent = zbn.make({"entity$": "z2/b2/n2"})
        assert ent.canon == Canon("z2", "b2", "n2")

    def test_entity_mapping_overrides(self, zbn):
        ent = zbn.make({"entity$": {"zone": "q", "base": "r", "name": "s"}})
        assert ent.canon == Canon("q", "r", "s")

    def test_entity_override_beats_positional(self, root):
        ent = root.make("x", "y", {"entity$": "z/b/n"})
        assert ent.canon == Canon("z", "b", "n")

    def test_partial_entity_override_inherits(self, zbn):
        assert zbn.make({"entity$": "n9"}).canon == Canon("z", "b", "n9")

    def test_empty_parts_in_entity_override_inherit(self, zbn):
        ent = zbn.make({"entity$": {"zone": "", "base": "b2", "name": "n2"}})
        assert ent.canon == Canon("z", "b2", "n2")
        assert ent.canon_str == "z/b2/n2"

    def test_empty_parts_from_root_are_absent(self, root):
        ent = root.make({"entity$": Canon("", "b", "n")})
        assert ent.canon_str == "-/b/n"

    def test_empty_part_controls_inherit(self, zbn):
        ent = zbn.make("n2", {"zone$": "", "base$": ""})
        assert ent.canon == Canon("z", "b", "n2")

    def test_name_control_field(self, zbn):
        assert zbn.make({"name$": "n3"}).canon == Canon("z", "b", "n3")

    def test_positional_name_beats_name_control(self, zbn):
        assert zbn.make("n4", {"name$": "n3"}).canon == Canon("z", "b", "n4")

    def test_part_control_fields(self, root):
        ent = root.make("n", {"zone$": "z", "base$": "b"})
        assert ent.canon == Canon("z", "b", "n")

    def test_positional_beats_part_control(self, root):
        ent = root.make("b1", "n", {"base$": "b2"})
        assert ent.canon.base == "b1"

    def test_embedded_beats_positional_base(self, root):
        ent = root.make("b1", "z/b2/n", {})
        assert ent.canon == Canon("z", "b2", "n")


class TestProperties:
    """Property bag ingestion."""

    def test_data_fields_copied_in_order(self, root):
        ent = root.make("n", {"b": 2, "a": 1})
        assert ent.fields() == ["b", "a"]

    def test_control_keys_dropped(self, root):
        ent = root.make("n", {"a": 1, "foo$": 2, "a$b": 3})
        assert ent.fields() == ["a"]

    def test_escaped_key_becomes_field(self, root):
        ent = root.make("n", {"foo_$": 1})
        assert ent.foo == 1
        assert "foo_$" not in ent

    def test_id_control_sets_id(self, root):
        assert root.make("n", {"id$": "abc"}).id == "abc"

    def test_props_not_mutated(self, root):
        props = {"a": 1, "entity$": "z/b/n"}
        root.make(props)
        assert props == {"a": 1, "entity$": "z/b/n"}

    def test_new_entity_is_independent(self, zbn):
        ent = zbn.make({"a": 1})
        ent.a = 2
        assert "a" not in zbn


class TestDispatcherAdoption:
    """A leading Dispatcher is adopted by the new entity."""

    def test_inherits_dispatcher(self, zbn, dispatcher):
        assert zbn.make("n2").dispatcher is dispatcher

    def test_leading_dispatcher_adopted(self, zbn, dispatcher, make_dispatcher):
        other = make_dispatcher()
        ent = zbn.make(other, "n2")
        assert ent.dispatcher is other
        assert ent.canon == Canon("z", "b", "n2")
        assert zbn.dispatcher is dispatcher

    def test_keyword_dispatcher(self, zbn, make_dispatcher):
        other = make_dispatcher()
        assert zbn.make("n2", dispatcher=other).dispatcher is other


class TestMakeEntity:
    """Root entity factory."""

    def test_root_canon(self, dispatcher, registry):
        ent = make_entity("z/b/n", dispatcher, registry=registry)
        assert isinstance(ent, Entity)
        assert ent.canon == Canon("z", "b", "n")

    def test_loads_hide_option(self, registry, make_dispatcher):
        d = make_dispatcher({"entity": {"hide": {"z/b/n": ["secret"]}}})
        make_entity(None, d, registry=registry)
        assert "secret" in registry.hidden_fields("z/b/n")

    def test_sealed_registry_not_configured(self, registry, make_dispatcher):
        registry.seal()
        d = make_dispatcher({"entity": {"hide": {"z/b/n": ["secret"]}}})
        make_entity(None, d, registry=registry)
        assert registry.hidden_fields("z/b/n") == frozenset({"id"})


class TestChangeCanon:
    """Deprecated in-place canon change."""

    def test_warns_and_changes(self, zbn):
        with pytest.warns(DeprecationWarning):
            zbn.change_canon(name="n2")
        assert zbn.canon == Canon("z", "b", "n2")

    def test_empty_part_left_untouched(self, zbn):
        with pytest.warns(DeprecationWarning):
            zbn.change_canon(zone="", name="n2")
        assert zbn.canon == Canon("z", "b", "n2")
