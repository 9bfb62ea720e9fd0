"""Tests for the component registry and the update cycle."""

import pytest

from pyqt_formgroup.exceptions import (
    DuplicateKeyError, EventHandlerTypeError, SnapshotInconsistencyError,
    StoreError, TypeKeyError,
)
from pyqt_formgroup.forms.registry import ComponentRegistry, GroupKeyAllocator
from pyqt_formgroup.io import JsonSnapshotStore
from pyqt_formgroup.protocols import ViewEvent


class RecordingNode:
    """Minimal view node recording reflected attributes and listeners."""

    def __init__(self):
        self.attrs = {}
        self.sets = []
        self.listeners = {}

    def set_attribute(self, name, value):
        self.attrs[name] = value
        self.sets.append((name, value))

    def add_event_listener(self, event_type, listener):
        self.listeners.setdefault(event_type, []).append(listener)

    def remove_event_listener(self, event_type, listener):
        self.listeners.get(event_type, []).remove(listener)

    def emit_event(self, event_type, data=None):
        for listener in list(self.listeners.get(event_type, [])):
            listener(ViewEvent(event_type, self, data))


class FailingStore(JsonSnapshotStore):
    """Store whose writes or reads can be made to fail on demand."""

    fail_write = False
    fail_read = False
    drop_group = None

    def write_snapshot(self, data):
        if self.fail_write:
            raise StoreError("write failed")
        super().write_snapshot(data)

    def read_snapshot(self):
        if self.fail_read:
            raise StoreError("read failed")
        data = super().read_snapshot()
        if self.drop_group is not None:
            data.pop(self.drop_group, None)
        return data


@pytest.fixture
def store(store_path):
    return FailingStore(store_path)


@pytest.fixture
def registry(store):
    return ComponentRegistry(store)


def test_allocator_is_monotonic_and_skips_taken_keys():
    allocator = GroupKeyAllocator()
    assert allocator.next_key() == "group0"
    assert allocator.next_key({"group1"}) == "group2"
    assert allocator.counter == 3


def test_allocate_group_key(registry):
    assert registry.allocate_group_key() == "group0"
    assert registry.allocate_group_key("") == "group1"
    assert registry.allocate_group_key("named") == "named"


def test_allocate_rejects_non_string(registry):
    with pytest.raises(TypeKeyError):
        registry.allocate_group_key(5)
    assert issubclass(TypeKeyError, TypeError)


def test_allocate_rejects_duplicate(registry):
    registry.register_instance("named", {}, {"value": 1}, {}, RecordingNode())
    with pytest.raises(DuplicateKeyError):
        registry.allocate_group_key("named")


def test_synthesized_key_never_collides_with_named_group(registry):
    registry.register_instance("group0", {}, {"value": 1}, {}, RecordingNode())
    assert registry.allocate_group_key() == "group1"


def test_register_flushes_and_renders(registry, store):
    node = RecordingNode()
    instance = registry.register_instance("g", {"_hidden": 1}, {"value": "a", "placeholder": "p"}, {}, node)

    assert store.read_snapshot() == {"g": [{"value": "a", "placeholder": "p"}]}
    assert node.attrs == {"value": "a", "placeholder": "p"}
    assert instance.properties["_hidden"] == 1
    assert registry.instances("g") == [instance]
    assert len(registry) == 1 and "g" in registry


def test_properties_are_read_only(registry):
    instance = registry.register_instance("g", {"type": "text"}, {"value": 1}, {}, RecordingNode())
    with pytest.raises(TypeError):
        instance.properties["type"] = "password"


def test_non_callable_handler_registers_nothing(registry, store):
    with pytest.raises(EventHandlerTypeError):
        registry.register_instance("g", {}, {"value": 1}, {"input": "not callable"}, RecordingNode())
    assert "g" not in registry
    assert store.read_snapshot() == {}


def test_set_state_round_trip_across_groups(registry, store):
    first = registry.register_instance("a", {}, {"value": 1}, {}, RecordingNode())
    second = registry.register_instance("b", {}, {"value": "x"}, {}, RecordingNode())

    returned = second.set_state({"value": "y", "title": "t"})

    assert returned == {"value": "y", "title": "t"}
    assert registry.get_snapshot() == {"a": [{"value": 1}], "b": [{"value": "y", "title": "t"}]}
    assert registry.get_snapshot("b") == [dict(second.state)]
    assert first.view_node.attrs == {"value": 1}
    assert second.view_node.attrs == {"value": "y", "title": "t"}


def test_set_state_copies_input(registry):
    instance = registry.register_instance("g", {}, {"value": 1}, {}, RecordingNode())
    new_state = {"value": 2}
    instance.set_state(new_state)
    new_state["value"] = 3
    assert instance.state == {"value": 2}


def test_set_state_coerces_missing_value(registry):
    instance = registry.register_instance("g", {}, {"value": 1}, {}, RecordingNode())
    assert instance.set_state({"placeholder": "p"}) == {"placeholder": "p", "value": ""}


def test_set_state_with_current_state_is_idempotent(registry, store_path):
    instance = registry.register_instance("g", {}, {"value": "a", "class": "c"}, {}, RecordingNode())
    before_file = store_path.read_text(encoding="utf-8")
    before_attrs = dict(instance.view_node.attrs)

    instance.set_state(dict(instance.state))

    assert store_path.read_text(encoding="utf-8") == before_file
    assert instance.view_node.attrs == before_attrs


def test_every_update_re_renders_every_instance(registry):
    first = registry.register_instance("a", {}, {"value": 1}, {}, RecordingNode())
    second = registry.register_instance("b", {}, {"value": 2}, {}, RecordingNode())
    first.view_node.sets.clear()

    second.set_state({"value": 3})

    assert first.view_node.sets == [("value", 1)]


def test_failed_flush_restores_state_and_skips_render(registry, store):
    instance = registry.register_instance("g", {}, {"value": "old"}, {}, RecordingNode())
    instance.view_node.sets.clear()
    store.fail_write = True

    with pytest.raises(StoreError):
        instance.set_state({"value": "new"})

    assert instance.state == {"value": "old"}
    assert instance.view_node.sets == []
    store.fail_write = False
    assert registry.get_snapshot("g") == [{"value": "old"}]


def test_failed_reload_restores_state(registry, store):
    instance = registry.register_instance("g", {}, {"value": "old"}, {}, RecordingNode())
    store.fail_read = True
    with pytest.raises(StoreError):
        instance.set_state({"value": "new"})
    assert instance.state == {"value": "old"}


def test_failed_registration_is_rolled_back(registry, store):
    store.fail_write = True
    with pytest.raises(StoreError):
        registry.register_instance("g", {}, {"value": 1}, {}, RecordingNode())
    assert "g" not in registry
    assert len(registry) == 0


def test_missing_group_in_reload_is_fatal(registry, store):
    instance = registry.register_instance("g", {}, {"value": 1}, {}, RecordingNode())
    store.drop_group = "g"
    with pytest.raises(SnapshotInconsistencyError):
        instance.set_state({"value": 2})


def test_handlers_receive_event_and_instance(registry):
    received = []

    def on_input(event, instance):
        received.append((event.type, event.data, instance))
        instance.set_state({"value": event.data.upper()})

    node = RecordingNode()
    instance = registry.register_instance("g", {}, {"value": ""}, {"input": on_input}, node)
    node.emit_event("input", "abc")

    assert received == [("input", "abc", instance)]
    assert registry.get_snapshot("g") == [{"value": "ABC"}]
    assert node.attrs["value"] == "ABC"


def test_handler_without_set_state_has_no_durable_effect(registry):
    def on_input(event, instance):
        instance.state["value"] = event.data

    node = RecordingNode()
    registry.register_instance("g", {}, {"value": "a"}, {"input": on_input}, node)
    node.emit_event("input", "b")

    assert registry.get_snapshot("g") == [{"value": "a"}]


def test_remove_instance_keeps_group_and_unbinds(registry):
    node = RecordingNode()
    registry.register_instance("g", {}, {"value": 1}, {"input": lambda e, i: None}, node)

    removed = registry.remove_instance("g", 0)
    registry.update()

    assert node.listeners["input"] == []
    assert removed.view_node is node
    assert registry.get_snapshot() == {"g": []}
    with pytest.raises(IndexError):
        registry.remove_instance("g", 0)


def test_get_snapshot_unknown_group_is_none(registry):
    assert registry.get_snapshot("nope") is None
