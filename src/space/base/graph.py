"""
Required-module graph formation and ordering.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .errors import CyclicModuleDependencyError, UnknownModuleError

logger = logging.getLogger(__name__)

ModuleLookup = Callable[[str], type[Any] | None]


@dataclass
class GraphNode:
    """A module in the graph together with the names it requires."""

    name: str
    module_class: type[Any]
    requires: list[str] = field(default_factory=list)


def required_module_names(module_class: type[Any]) -> list[str]:
    """The required module names of a module class, duplicates removed, order kept."""
    return list(dict.fromkeys(getattr(module_class, "required_modules", None) or ()))


class ModuleGraph:
    """
    The graph of modules reachable from a root module through ``required_modules``.

    Names are looked up with the given ``lookup`` function, usually the
    published-module registry. Each name becomes a single node, no matter how
    many modules require it.
    """

    def __init__(self, root_name: str, root_class: type[Any], lookup: ModuleLookup):
        super().__init__()
        self._root_name = root_name
        self._lookup = lookup
        self._nodes: dict[str, GraphNode] = {}
        self._order: list[str] | None = None
        self._root = GraphNode(root_name, root_class, required_module_names(root_class))

    def get_node(self, name: str) -> GraphNode | None:
        return self._nodes.get(name)

    def module_class(self, name: str) -> type[Any]:
        """
        Get the module class of a resolved node.

        Raises:
            UnknownModuleError: If no node with that name was resolved
        """
        node = self._nodes.get(name)
        if node is None:
            raise UnknownModuleError(name)
        return node.module_class

    def get_topological_order(self) -> list[str]:
        """
        Get module names so that every module comes after all modules it requires.

        The order is deterministic: a depth-first walk over ``required_modules``
        in declaration order, emitting each module after its requirements.
        The root module is always last.

        Raises:
            CyclicModuleDependencyError: If modules require each other in a cycle
            UnknownModuleError: If a required name cannot be looked up
        """
        if self._order is not None:
            return list(self._order)

        WHITE = 0  # Not visited
        GRAY = 1  # Currently being processed
        BLACK = 2  # Completely processed

        colors: dict[str, int] = defaultdict(lambda: WHITE)
        order: list[str] = []

        def dfs(node: GraphNode, path: list[str]) -> None:
            if colors[node.name] == GRAY:
                # Found a back edge - circular dependency
                cycle_start = path.index(node.name)
                raise CyclicModuleDependencyError(path[cycle_start:] + [node.name])

            if colors[node.name] == BLACK:
                return

            colors[node.name] = GRAY
            path.append(node.name)

            for required in node.requires:
                dfs(self._node_for(required, node.name), path)

            path.pop()
            colors[node.name] = BLACK
            order.append(node.name)

        self._nodes[self._root_name] = self._root
        dfs(self._root, [])

        logger.debug("Resolved module order: %s", " -> ".join(order))
        self._order = order
        return list(order)

    def _node_for(self, name: str, required_by: str) -> GraphNode:
        node = self._nodes.get(name)
        if node is not None:
            return node

        module_class = self._lookup(name)
        if module_class is None:
            raise UnknownModuleError(name, required_by)

        node = GraphNode(name, module_class, required_module_names(module_class))
        self._nodes[name] = node
        return node
