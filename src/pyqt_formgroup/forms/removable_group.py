"""
Removable (add/remove) input groups.

Builds a resizable list of instances capped at ``max``. The visual list is a
container node whose child order must match the registry group's order at
all times: removal resolves which registry entry to drop purely from the
component wrapper's visual position.

States per group (they only drive the add control's visibility):
- count < max: add control shown
- count == max: add control hidden
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from pyqt_formgroup.exceptions import FormGroupError, RegistryOrderError
from pyqt_formgroup.forms.constants import CONSTANTS
from pyqt_formgroup.forms.instance import FormInstance
from pyqt_formgroup.forms.options import GroupOptions
from pyqt_formgroup.protocols.form_config import get_form_config
from pyqt_formgroup.protocols.view_protocols import EventListener, ViewEvent

if TYPE_CHECKING:
    from pyqt_formgroup.forms.engine import FormGroupEngine

logger = logging.getLogger(__name__)


class RemovableGroupManager:
    """
    Manager for one removable input group.

    Add control:
        Appends an instance with a blanked copy of the first initial state,
        at the trailing position of both the visual list and the registry,
        then focuses it.

    Removal:
        Triggered by an instance's remove control, or by its input losing
        focus while its value is "". The wrapper's visual index selects the
        registry entry; the entry is dropped, the wrapper detached, and the
        update cycle runs.
    """

    def __init__(self, engine: "FormGroupEngine", options: GroupOptions):
        self._engine = engine
        self._registry = engine.registry
        self._factory = engine.view_factory
        self.options = options
        self.group_key = options.group_key
        self.max = options.max

        config = get_form_config()
        self._template = {key: CONSTANTS.EMPTY_VALUE for key in options.state[0]}
        self._owners: Dict[int, FormInstance] = {}
        # Listeners capturing a wrapper, dropped once it is removed
        self._controls: Dict[int, List[Tuple[Any, str, EventListener]]] = {}

        self.group_wrapper = engine.create_group_wrapper(options)
        self.container = self._factory.create_container()

        add_props = dict(options.add_new_button)
        add_props[CONSTANTS.VALUE_ATTR] = add_props.get(CONSTANTS.VALUE_ATTR) or config.add_new_label
        add_props[CONSTANTS.TYPE_ATTR] = CONSTANTS.BUTTON_TYPE
        self.add_button = engine.create_input(add_props)
        self.add_button.add_event_listener(CONSTANTS.CLICK_EVENT, self._on_add_clicked)

        self._remove_props = dict(options.remove_button)
        self._remove_props[CONSTANTS.VALUE_ATTR] = self._remove_props.get(CONSTANTS.VALUE_ATTR) or config.remove_label
        self._remove_props[CONSTANTS.TYPE_ATTR] = CONSTANTS.BUTTON_TYPE

    @property
    def count(self) -> int:
        """Number of instances in the visual list."""
        return self.container.child_count()

    @property
    def can_add(self) -> bool:
        return self.count < self.max

    @property
    def add_control_visible(self) -> bool:
        return self.group_wrapper.contains(self.add_button)

    def wrappers(self) -> List[Any]:
        """Component wrappers in visual order."""
        return self.container.child_nodes()

    def build(self) -> Any:
        """
        Create the initial instances and return the group's root node.

        States past ``max`` are dropped and never persisted.
        """
        dropped = len(self.options.state) - self.max
        if dropped > 0:
            logger.debug(f"Group '{self.group_key}': dropping {dropped} initial state(s) past max={self.max}")

        for state in self.options.state[:self.max]:
            self.container.append_child(self._create_component(dict(state)))

        self.group_wrapper.append_child(self.container)
        self.refresh_add_control()
        return self.group_wrapper

    def add(self) -> Optional[FormInstance]:
        """
        Append a blank instance if the cap allows.

        Returns:
            The new instance, or None when count == max.
        """
        instance = None
        if self.can_add:
            wrapper = self._create_component(dict(self._template))
            self.container.append_child(wrapper)
            instance = self._owners[id(wrapper)]
            instance.view_node.focus()
            logger.debug(f"Group '{self.group_key}': added instance {self.count}/{self.max}")
        self.refresh_add_control()
        return instance

    def remove(self, wrapper: Any) -> bool:
        """
        Remove the instance shown in a component wrapper.

        Returns:
            False if the wrapper was already detached, True otherwise.

        Raises:
            RegistryOrderError: If the registry entry at the wrapper's
                visual index is not the wrapper's instance.
            StoreError: If the update cycle fails. The instance goes back
                to its registry index and the wrapper to its visual index.
        """
        with self._registry.lock:
            resolved = self._resolve(wrapper)
            if resolved is None:
                return False
            index, instance = resolved

            self._registry.remove_instance(self.group_key, index)
            self.container.remove_child(wrapper)
            del self._owners[id(wrapper)]
            try:
                self._registry.update()
            except FormGroupError:
                self._owners[id(wrapper)] = instance
                self.container.insert_child(index, wrapper)
                self._registry.insert_instance(self.group_key, index, instance)
                logger.error(f"Group '{self.group_key}': removal at index {index} rolled back")
                raise

        for node, event_type, listener in self._controls.pop(id(wrapper), []):
            node.remove_event_listener(event_type, listener)
        logger.debug(f"Group '{self.group_key}': removed instance at index {index}")
        return True

    def refresh_add_control(self) -> None:
        """Show the add control iff count < max."""
        if self.can_add:
            self.group_wrapper.append_child(self.add_button)
        elif self.group_wrapper.contains(self.add_button):
            self.group_wrapper.remove_child(self.add_button)

    def _resolve(self, wrapper: Any) -> Optional[Tuple[int, FormInstance]]:
        index = self.container.index_of(wrapper)
        if index == -1:
            logger.debug(f"Group '{self.group_key}': wrapper already detached")
            return None
        instances = self._registry.instances(self.group_key)
        owner = self._owners.get(id(wrapper))
        if index >= len(instances) or instances[index] is not owner:
            raise RegistryOrderError(
                f"Group '{self.group_key}': visual index {index} does not match the registry order."
            )
        return index, instances[index]

    def _create_component(self, state: Dict[str, Any]) -> Any:
        opt = self.options
        wrapper = self._engine.create_component_wrapper(opt)
        node = self._engine.create_input(opt.props_at(0))
        instance = self._registry.register_instance(
            self.group_key, opt.props_at(0), state, opt.events_at(0), node
        )
        self._owners[id(wrapper)] = instance

        def on_blur(event: ViewEvent) -> None:
            self._on_blur(wrapper)

        def on_remove(event: ViewEvent) -> None:
            self._on_remove_clicked(wrapper)

        remove_button = self._engine.create_input(self._remove_props)
        node.add_event_listener(CONSTANTS.BLUR_EVENT, on_blur)
        remove_button.add_event_listener(CONSTANTS.CLICK_EVENT, on_remove)
        self._controls[id(wrapper)] = [
            (node, CONSTANTS.BLUR_EVENT, on_blur),
            (remove_button, CONSTANTS.CLICK_EVENT, on_remove),
        ]

        wrapper.append_child(instance.render())
        wrapper.append_child(remove_button)
        return wrapper

    def _on_add_clicked(self, event: ViewEvent) -> None:
        self.add()

    def _on_remove_clicked(self, wrapper: Any) -> None:
        self.remove(wrapper)
        self.refresh_add_control()

    def _on_blur(self, wrapper: Any) -> None:
        resolved = self._resolve(wrapper)
        if resolved is not None and resolved[1].state.get(CONSTANTS.VALUE_ATTR) == CONSTANTS.EMPTY_VALUE:
            self.remove(wrapper)
        self.refresh_add_control()
