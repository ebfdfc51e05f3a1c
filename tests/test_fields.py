"""
Tests for fields.py - property key classification.
"""

import pytest

from entcanon.fields import FieldKind, classify_key, data_name, is_assignable, is_control


class TestClassifyKey:
    """Test data / control / escape classification."""

    @pytest.mark.parametrize("key", ["title", "id", "a_b", "_private"])
    def test_data_keys(self, key):
        assert classify_key(key) is FieldKind.DATA

    @pytest.mark.parametrize("key", ["merge$", "entity$", "a$b", "$", "_$"])
    def test_control_keys(self, key):
        assert classify_key(key) is FieldKind.CONTROL

    def test_escape_key(self):
        assert classify_key("foo_$") is FieldKind.ESCAPE
        assert data_name("foo_$") == "foo"

    def test_data_name_leaves_data_keys(self):
        assert data_name("foo") == "foo"

    def test_is_control(self):
        assert is_control("name$")
        assert not is_control("a$b")

    def test_is_assignable(self):
        assert is_assignable("a$b")
        assert not is_assignable("$a")
        assert not is_assignable("a$")


class TestSigil:
    """One sigil for control keys, canon strings and rendering."""

    def test_shared_by_canon_and_render(self, zbn):
        from entcanon import canon, render
        from entcanon.fields import SIGIL

        assert canon.SIGIL is SIGIL
        assert render.SIGIL is SIGIL
        assert zbn.format_canon("string$") == SIGIL + "z/b/n"
        assert str(zbn).startswith(SIGIL + "z/b/n;")
