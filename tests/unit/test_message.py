"""Unit tests for Message instances and templates."""

from __future__ import annotations

import pytest

from protoreflect import Message, MessageTemplate


@pytest.fixture
def template() -> MessageTemplate:
    return MessageTemplate("pkg.Person", {"id": 0, "name": ""})


class TestMessageTemplate:
    """Test the shared default template."""

    def test_read_only(self, template: MessageTemplate) -> None:
        assert template["name"] == ""
        assert len(template) == 2
        with pytest.raises(TypeError):
            template["name"] = "x"  # type: ignore[index]

    def test_copies_defaults(self) -> None:
        defaults = {"id": 0}
        template = MessageTemplate("T", defaults)
        defaults["id"] = 5
        assert template["id"] == 0


class TestMessage:
    """Test item/attribute access on top of the template."""

    def test_falls_back_to_template(self, template: MessageTemplate) -> None:
        msg = Message(template, {"id": 7})
        assert msg["id"] == 7
        assert msg.name == ""
        assert msg.is_set("id")
        assert not msg.is_set("name")

    def test_attribute_and_item_are_the_same_slot(self, template: MessageTemplate) -> None:
        msg = Message(template)
        msg.name = "x"
        assert msg["name"] == "x"
        msg["id"] = 3
        assert msg.id == 3
        assert msg.materialized == {"name": "x", "id": 3}

    def test_delete_restores_default(self, template: MessageTemplate) -> None:
        msg = Message(template, {"name": "x"})
        del msg.name
        assert msg.name == ""
        assert not msg.is_set("name")
        with pytest.raises(KeyError):
            del msg["name"]

    def test_unknown_attribute(self, template: MessageTemplate) -> None:
        msg = Message(template)
        with pytest.raises(AttributeError, match="pkg.Person"):
            _ = msg.missing
        with pytest.raises(KeyError):
            _ = msg["missing"]

    def test_extra_keys(self, template: MessageTemplate) -> None:
        """Keys outside the template (containers) are iterated after template keys."""
        msg = Message(template, {"tags": [1], "id": 1})
        assert list(msg) == ["id", "name", "tags"]
        assert len(msg) == 3
        assert "tags" in msg

    def test_mapping_equality(self, template: MessageTemplate) -> None:
        msg = Message(template, {"id": 7})
        assert msg == {"id": 7, "name": ""}
        assert msg != {"id": 7}

    def test_to_dict_recurses(self, template: MessageTemplate) -> None:
        inner = Message(MessageTemplate("pkg.Inner", {"x": 0}), {"x": 1})
        msg = Message(template, {"child": inner, "items": [inner], "by_key": {"k": inner}})
        plain = msg.to_dict()
        assert plain["child"] == {"x": 1}
        assert type(plain["child"]) is dict
        assert plain["items"] == [{"x": 1}]
        assert plain["by_key"] == {"k": {"x": 1}}

    def test_repr(self, template: MessageTemplate) -> None:
        assert repr(Message(template, {"id": 1})) == "<pkg.Person {'id': 1, 'name': ''}>"

    def test_instances_do_not_share_values(self, template: MessageTemplate) -> None:
        a = Message(template)
        b = Message(template)
        a.id = 1
        assert b.id == 0

    @pytest.mark.parametrize("name", ["items", "values", "keys", "get", "pop", "clear", "update"])
    def test_field_named_like_mapping_method(self, name: str) -> None:
        """A field value takes precedence over the mapping method of the same name."""
        msg = Message(MessageTemplate("pkg.T", {name: 0}), {name: 5})
        assert getattr(msg, name) == 5
        assert msg[name] == 5
        assert Message.keys(msg) == {name}

    def test_template_field_shadows_method(self) -> None:
        msg = Message(MessageTemplate("pkg.T", {"items": 0}))
        assert msg.items == 0
        assert msg.to_dict() == {"items": 0}
        assert msg == {"items": 0}
        assert repr(msg) == "<pkg.T {'items': 0}>"
