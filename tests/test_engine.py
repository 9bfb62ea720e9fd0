"""Tests for the engine's construction surface and group builders."""

import json

import pytest

from pyqt_formgroup import (
    ConfigShapeError, DuplicateKeyError, EventHandlerTypeError, FormGroupEngine,
    StoreError, TypeKeyError, create,
)
from pyqt_formgroup.protocols import (
    ButtonNodeAdapter, ContainerNodeAdapter, InputNodeAdapter, LabelNodeAdapter,
)


def test_fresh_engine_writes_empty_snapshot(engine, store_path):
    assert json.loads(store_path.read_text(encoding="utf-8")) == {}
    assert engine.get_data() == {}


def test_unwritable_path_aborts_construction(qapp, tmp_path):
    with pytest.raises(StoreError):
        create(tmp_path / "missing" / "state.json")


def test_store_options(qapp, store_path):
    engine = create(store_path, {"encoding": "utf-8", "indent_width": 4})
    engine.input_group(state="a")
    assert store_path.read_text(encoding="utf-8") == json.dumps({"group0": [{"value": "a"}]}, indent=4)


def test_input_group_scenario(engine):
    root = engine.input_group({"state": "hello"})
    assert isinstance(root, ContainerNodeAdapter)
    assert engine.get_data() == {"group0": [{"value": "hello"}]}


def test_input_group_renders_heading_description_and_input(qapp, store_path):
    engine = create(store_path, css={
        "form_group": "fg",
        "form_group_heading": "fg-h",
        "form_group_description": "fg-d",
        "form_group_component": "fg-c",
        "form_group_input": "fg-i",
    })
    root = engine.input_group(
        heading="Heading",
        description="Description",
        group_class="extra",
        component_class="mb-1",
        props={"placeholder": "Type here", "class": "wide", "_regex": "[a-z]"},
        state={"value": "initial"},
    )

    heading, description, component = root.child_nodes()
    assert isinstance(heading, LabelNodeAdapter) and heading.text() == "Heading"
    assert heading.get_attribute("class") == "fg-h"
    assert isinstance(description, LabelNodeAdapter) and description.text() == "Description"
    assert root.get_attribute("class") == "fg extra"
    assert component.get_attribute("class") == "fg-c mb-1"

    (node,) = component.child_nodes()
    assert isinstance(node, InputNodeAdapter)
    assert node.text() == "initial"
    assert node.placeholderText() == "Type here"
    assert node.get_attribute("class") == "fg-i wide"
    assert node.get_attribute("type") == "text"
    assert node.get_attribute("_regex") is None

    (instance,) = engine.instances("group0")
    assert instance.properties["_regex"] == "[a-z]"
    assert instance.view_node is node


def test_default_keys_follow_call_order_across_builders(engine):
    engine.input_group(state="a")
    engine.inputs_group(state=["b", "c"])
    engine.removable_inputs_group(state=[1])
    engine.input_group(state="d", group_key="named")
    engine.input_group(state="e")

    assert list(engine.get_data()) == ["group0", "group1", "group2", "named", "group3"]


def test_explicit_key_errors(engine):
    engine.input_group(state="a", group_key="mine")
    with pytest.raises(DuplicateKeyError):
        engine.input_group(state="b", group_key="mine")
    with pytest.raises(TypeKeyError):
        engine.input_group(state="b", group_key=7)


def test_empty_state_is_fatal_and_creates_nothing(engine):
    for builder in (engine.input_group, engine.inputs_group, engine.removable_inputs_group):
        with pytest.raises(ConfigShapeError):
            builder(state=[])
    assert engine.get_data() == {}
    engine.input_group(state="a")
    assert list(engine.get_data()) == ["group0"]


def test_missing_options_are_fatal(engine):
    with pytest.raises(ConfigShapeError):
        engine.input_group()


def test_non_callable_event_is_fatal(engine):
    with pytest.raises(EventHandlerTypeError):
        engine.input_group(state="a", events={"input": 3})
    assert engine.get_data() == {}


def test_inputs_group_pads_to_longest_of_state_and_props(engine):
    root = engine.inputs_group(
        state=[{"value": "abc"}, {"value": "012"}],
        props=[{"placeholder": "letters"}, {"placeholder": "digits"}, {"placeholder": "extra"}],
    )
    assert len(root.child_nodes()) == 3
    assert engine.get_data("group0") == [{"value": "abc"}, {"value": "012"}, {"value": ""}]
    placeholders = [c.child_nodes()[0].placeholderText() for c in root.child_nodes()]
    assert placeholders == ["letters", "digits", "extra"]


def test_max_is_ignored_by_fixed_size_builders(engine):
    engine.input_group(state="a", max=-1)
    engine.inputs_group(state=["b", "c"], max="many")
    engine.removable_inputs_group(state=["d"], max=0)

    assert engine.get_data() == {
        "group0": [{"value": "a"}],
        "group1": [{"value": "b"}, {"value": "c"}],
        "group2": [{"value": "d"}],
    }
    assert engine.removable_group("group2").max == 10


def test_event_handlers_are_positional(engine):
    calls = []
    engine.inputs_group(
        state=["a", "b", "c"],
        events=[{"input": lambda e, i: calls.append(0)}, {"input": lambda e, i: calls.append(1)}],
    )
    nodes = [instance.view_node for instance in engine.instances("group0")]
    for node in nodes:
        node.emit_event("input", "x")
    assert calls == [0, 1]


def test_input_event_round_trip(engine):
    def on_input(event, instance):
        state = dict(instance.state)
        state["value"] = "".join(ch for ch in event.data if ch.isalpha())
        event.target.setText(instance.set_state(state)["value"])

    engine.input_group(state="", events={"input": on_input})
    (instance,) = engine.instances("group0")
    node = instance.view_node

    node.setText("ab1c")
    node.textEdited.emit("ab1c")

    assert engine.get_data("group0") == [{"value": "abc"}]
    assert instance.state == {"value": "abc"}
    assert node.text() == "abc"


def test_set_state_reflects_attribute_overrides(engine):
    engine.input_group(state={"value": "a"}, props={"placeholder": "from props"})
    (instance,) = engine.instances("group0")
    instance.set_state({"value": "b", "placeholder": "from state", "disabled": "true"})

    node = instance.view_node
    assert node.text() == "b"
    assert node.placeholderText() == "from state"
    assert not node.isEnabled()
    assert engine.get_data() == {"group0": [{"value": "b", "placeholder": "from state", "disabled": "true"}]}


def test_round_trip_law_for_every_group(engine):
    engine.input_group(state="a")
    engine.inputs_group(state=[1, 2])
    for instance in engine.instances("group1"):
        instance.set_state({"value": instance.state["value"] * 10})

    for key in engine.registry.group_keys():
        assert engine.get_data(key) == [dict(i.state) for i in engine.instances(key)]
    assert engine.get_data("group1") == [{"value": 10}, {"value": 20}]


def test_rerender_does_not_reenter_handlers(engine):
    calls = []
    engine.input_group(state="a", events={"input": lambda e, i: calls.append(e)})
    (instance,) = engine.instances("group0")
    instance.set_state({"value": "changed"})
    assert calls == []


def test_engine_class_is_create_result(engine):
    assert isinstance(engine, FormGroupEngine)
    assert isinstance(engine.view_factory.create_input({"type": "button"}), ButtonNodeAdapter)
