"""Packed bounding-box tree built with the Sort-Tile-Recursive (STR) algorithm.

The tree is built once from the complete set of ``(envelope, handle)``
entries and never modified afterwards, so it can be shared between threads
without locking. It only ever looks at envelopes; exact geometry is the
resolver's job.

Build, for ``N`` items and node capacity ``M``:

1. ``P = ceil(N / M)`` nodes are needed at this level, ``S = ceil(sqrt(P))``.
2. Sort items by envelope centre x and cut them into vertical slices of
   ``S * M`` items.
3. Sort each slice by centre y and pack consecutive runs of ``M`` into nodes.
4. Repeat with the new nodes as items until a single root remains.
"""

import logging
import math
import typing as t

from tzlocate.geo.envelope import Envelope

logger = logging.getLogger(__name__)

DEFAULT_NODE_CAPACITY = 10

Entry = tuple[Envelope, int]


class _Node:
    """Leaf nodes hold ``(envelope, handle)`` entries, internal nodes hold ``_Node``s."""

    __slots__ = ("envelope", "children", "leaf", "order")

    def __init__(self, envelope: Envelope, children: list, leaf: bool, order: int):
        self.envelope = envelope
        self.children = children
        self.leaf = leaf
        self.order = order


def _leaf(entries: list[Entry]) -> _Node:
    return _Node(
        Envelope.union_all(env for env, _ in entries),
        entries,
        leaf=True,
        order=min(handle for _, handle in entries),
    )


def _branch(nodes: list[_Node]) -> _Node:
    return _Node(
        Envelope.union_all(node.envelope for node in nodes),
        nodes,
        leaf=False,
        order=min(node.order for node in nodes),
    )


def _pack(
    items: list,
    capacity: int,
    envelope_of: t.Callable[[t.Any], Envelope],
    order_of: t.Callable[[t.Any], int],
    make_node: t.Callable[[list], _Node],
) -> list[_Node]:
    """One STR level: tile ``items`` into nodes of at most ``capacity`` items."""
    node_count = math.ceil(len(items) / capacity)
    slice_count = math.ceil(math.sqrt(node_count))
    slice_size = slice_count * capacity

    def x_key(item):
        env = envelope_of(item)
        return (env.min_x + env.max_x, order_of(item))

    def y_key(item):
        env = envelope_of(item)
        return (env.min_y + env.max_y, order_of(item))

    by_x = sorted(items, key=x_key)
    nodes = []
    for start in range(0, len(by_x), slice_size):
        vertical = sorted(by_x[start : start + slice_size], key=y_key)
        for run in range(0, len(vertical), capacity):
            nodes.append(make_node(vertical[run : run + capacity]))
    return nodes


class STRtree:
    """Static envelope index answering point and box queries with region handles."""

    def __init__(self, root: _Node | None, size: int, node_capacity: int):
        self._root = root
        self._size = size
        self.node_capacity = node_capacity

    @classmethod
    def build(cls, entries: t.Iterable[Entry], node_capacity: int = DEFAULT_NODE_CAPACITY) -> "STRtree":
        """Bulk-load a tree. An empty ``entries`` gives a tree that returns no candidates.

        Raises ValueError for ``node_capacity < 2``, malformed envelopes or repeated handles.
        """
        if node_capacity < 2:
            raise ValueError(f"node_capacity must be at least 2, got {node_capacity}")
        items: list[Entry] = []
        seen: set[int] = set()
        for envelope, handle in entries:
            if not envelope.is_valid:
                raise ValueError(f"Malformed envelope for handle {handle!r}: {envelope}")
            if handle in seen:
                raise ValueError(f"Duplicate handle {handle!r}")
            seen.add(handle)
            items.append((envelope, handle))

        if not items:
            logger.debug("Built empty STR tree")
            return cls(None, 0, node_capacity)

        level = _pack(items, node_capacity, lambda e: e[0], lambda e: e[1], _leaf)
        while len(level) > 1:
            level = _pack(level, node_capacity, lambda n: n.envelope, lambda n: n.order, _branch)
        tree = cls(level[0], len(items), node_capacity)
        logger.debug("Built STR tree: %d entries, depth %d, %d nodes", len(items), tree.depth, tree.node_count)
        return tree

    def query(self, x: float, y: float) -> list[int]:
        """Return the handles of every entry whose envelope contains ``(x, y)``, edges included."""
        root = self._root
        if root is None or not root.envelope.contains_point(x, y):
            return []
        found: list[int] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.leaf:
                found.extend(handle for env, handle in node.children if env.contains_point(x, y))
            else:
                stack.extend(child for child in node.children if child.envelope.contains_point(x, y))
        return found

    def query_point(self, coordinate: t.Sequence[float]) -> list[int]:
        x, y = coordinate
        return self.query(x, y)

    def query_envelope(self, envelope: Envelope) -> list[int]:
        """Return the handles of every entry whose envelope intersects ``envelope``."""
        root = self._root
        if root is None or not root.envelope.intersects(envelope):
            return []
        found: list[int] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.leaf:
                found.extend(handle for env, handle in node.children if env.intersects(envelope))
            else:
                stack.extend(child for child in node.children if child.envelope.intersects(envelope))
        return found

    @property
    def envelope(self) -> Envelope | None:
        return None if self._root is None else self._root.envelope

    @property
    def depth(self) -> int:
        """Number of levels, leaves included; 0 for an empty tree."""
        depth = 0
        node = self._root
        while node is not None:
            depth += 1
            node = None if node.leaf else node.children[0]
        return depth

    @property
    def node_count(self) -> int:
        if self._root is None:
            return 0
        count = 0
        stack = [self._root]
        while stack:
            node = stack.pop()
            count += 1
            if not node.leaf:
                stack.extend(node.children)
        return count

    def __len__(self) -> int:
        return self._size
