"""
Form group engine: the public construction and runtime surface.

An engine owns one snapshot store, one component registry and one view
factory. Group builders normalize their options, build the group's nodes
through the view factory and register one instance per input; every
registration and every set_state() runs the registry's update cycle.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pyqt_formgroup.forms.constants import CONSTANTS
from pyqt_formgroup.forms.css_hooks import compose_class_string
from pyqt_formgroup.forms.instance import FormInstance
from pyqt_formgroup.forms.options import GroupOptions, merge_options, normalize_options
from pyqt_formgroup.forms.registry import ComponentRegistry
from pyqt_formgroup.forms.removable_group import RemovableGroupManager
from pyqt_formgroup.io.json_store import JsonSnapshotStore
from pyqt_formgroup.protocols.form_config import CssHooks, StoreOptions, get_form_config
from pyqt_formgroup.protocols.qt_adapters import QtViewFactory
from pyqt_formgroup.protocols.view_protocols import ViewFactory

logger = logging.getLogger(__name__)


class FormGroupEngine:
    """
    Store-backed form group generator.

    Example:
        engine = FormGroupEngine("./form_state.json", {"indent_width": 2},
                                 {"form_group_input": "fg-input"})

        def on_input(event, instance):
            state = dict(instance.state)
            state["value"] = event.data
            instance.set_state(state)

        root = engine.input_group(heading="Name", state="hello",
                                  events={"input": on_input})
        engine.get_data()  # {"group0": [{"value": "hello"}]}
    """

    def __init__(self, path: Union[str, Path],
                 options: Union[StoreOptions, Mapping[str, Any], None] = None,
                 css: Union[CssHooks, Mapping[str, Any], None] = None,
                 view_factory: Optional[ViewFactory] = None):
        """
        Create the engine and probe the snapshot path.

        Args:
            path: Snapshot file path (created or truncated).
            options: StoreOptions or mapping with "encoding" and "indent_width".
            css: CssHooks or mapping of default class strings.
            view_factory: Rendering primitives; defaults to QtViewFactory.

        Raises:
            StoreError: If the path cannot be written.
        """
        self.options = StoreOptions.from_mapping(options)
        self.css = CssHooks.from_mapping(css)
        self.store = JsonSnapshotStore(path, self.options.encoding, self.options.indent_width)
        self.path = self.store.path
        self.registry = ComponentRegistry(self.store)
        if view_factory is None:
            view_factory = QtViewFactory()
        self.view_factory = view_factory
        self._removable_groups: Dict[str, RemovableGroupManager] = {}
        logger.info(f"FormGroupEngine created with snapshot at {self.path}")

    # ========== RUNTIME SURFACE ==========

    def get_data(self, group_key: Optional[str] = None) -> Any:
        """
        Return the latest states, read fresh from the snapshot file.

        Args:
            group_key: Existing group key. If omitted, all groups are returned.

        Returns:
            {group_key: [state, ...]} for all groups, or one group's list
            (None if the group is unknown).
        """
        return self.registry.get_snapshot(group_key)

    def input_group(self, options: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        """
        Build a single-input group.

        Uses the first state, props and events entries.

        Returns:
            The group's root node.
        """
        opt = self._normalize(options, kwargs)
        wrapper = self.create_group_wrapper(opt)
        instance = self._register(opt, 0)
        component = self.create_component_wrapper(opt)
        component.append_child(instance.render())
        wrapper.append_child(component)
        return wrapper

    def inputs_group(self, options: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        """
        Build a fixed-size multi-input group.

        One instance per position up to the longer of state and props;
        positions past the end of state start as {"value": ""}, positions
        past the end of props/events get none.

        Returns:
            The group's root node.
        """
        opt = self._normalize(options, kwargs)
        wrapper = self.create_group_wrapper(opt)
        for index in range(max(len(opt.state), len(opt.props))):
            instance = self._register(opt, index)
            component = self.create_component_wrapper(opt)
            component.append_child(instance.render())
            wrapper.append_child(component)
        return wrapper

    def removable_inputs_group(self, options: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        """
        Build a resizable group with add/remove controls, capped at ``max`` (default 10).

        Every instance uses the first props and events entries.

        Returns:
            The group's root node.
        """
        opt = self._normalize(options, kwargs, resizable=True)
        manager = RemovableGroupManager(self, opt)
        root = manager.build()
        self._removable_groups[opt.group_key] = manager
        return root

    def removable_group(self, group_key: str) -> RemovableGroupManager:
        """Return the manager of a removable group built by this engine."""
        return self._removable_groups[group_key]

    def instances(self, group_key: str) -> List[FormInstance]:
        """Instances of a group in registry order."""
        return self.registry.instances(group_key)

    # ========== RENDERING HELPERS ==========

    def create_group_wrapper(self, opt: GroupOptions) -> Any:
        """Create the group wrapper with its optional heading and description."""
        wrapper = self.view_factory.create_group_wrapper(
            compose_class_string(self.css.form_group, opt.group_class)
        )
        if opt.heading:
            wrapper.append_child(self.view_factory.create_heading(
                opt.heading, compose_class_string(self.css.form_group_heading, opt.heading_class)
            ))
        if opt.description:
            wrapper.append_child(self.view_factory.create_description(
                opt.description, compose_class_string(self.css.form_group_description, opt.description_class)
            ))
        return wrapper

    def create_component_wrapper(self, opt: GroupOptions) -> Any:
        return self.view_factory.create_component_wrapper(
            compose_class_string(self.css.form_group_component, opt.component_class)
        )

    def create_input(self, props: Optional[Mapping[str, Any]]) -> Any:
        """
        Create an input node from immutable props.

        Private props (leading underscore) are not reflected. The type
        defaults to the configured input type and the class is merged with
        the engine's input hook.
        """
        props = props or {}
        attributes = {
            name: value for name, value in props.items()
            if not str(name).startswith(CONSTANTS.PRIVATE_PREFIX)
        }
        attributes[CONSTANTS.TYPE_ATTR] = attributes.get(CONSTANTS.TYPE_ATTR) or get_form_config().default_input_type
        class_string = compose_class_string(self.css.form_group_input, attributes.get(CONSTANTS.CLASS_ATTR))
        if class_string:
            attributes[CONSTANTS.CLASS_ATTR] = class_string
        else:
            attributes.pop(CONSTANTS.CLASS_ATTR, None)
        return self.view_factory.create_input(attributes)

    # ========== INTERNALS ==========

    def _normalize(self, options: Optional[Mapping[str, Any]], overrides: Mapping[str, Any],
                   resizable: bool = False) -> GroupOptions:
        return normalize_options(merge_options(options, overrides), self.registry.allocate_group_key, resizable)

    def _register(self, opt: GroupOptions, index: int) -> FormInstance:
        props = opt.props_at(index)
        node = self.create_input(props)
        return self.registry.register_instance(
            opt.group_key, props, opt.state_at(index), opt.events_at(index), node
        )


def create(path: Union[str, Path],
           options: Union[StoreOptions, Mapping[str, Any], None] = None,
           css: Union[CssHooks, Mapping[str, Any], None] = None,
           view_factory: Optional[ViewFactory] = None) -> FormGroupEngine:
    """Create a FormGroupEngine; see FormGroupEngine.__init__."""
    return FormGroupEngine(path, options, css, view_factory)
