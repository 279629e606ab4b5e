from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from blobdrive.core.errors import DuplicateKeyError, InvalidKeyError
from blobdrive.core.keys import first_segment, join, remainder, segments


@dataclass(frozen=True)
class FlatEntry:
    key: str
    ref: Any


@dataclass(frozen=True)
class Node:
    """One level of the reconstructed hierarchy.

    ``ref`` is a borrowed handle to the stored object whose key equals this
    node's full path. A node can carry a ``ref`` and children at the same time.
    """

    name: str
    ref: Any = None
    children: tuple[Node, ...] = ()

    @property
    def is_directory(self) -> bool:
        return bool(self.children)

    @property
    def is_object(self) -> bool:
        return self.ref is not None


def build_tree(entries: Iterable[FlatEntry]) -> tuple[Node, ...]:
    """Fold a flat key listing into a forest of nodes.

    Groups keep the order in which their first segment first appears in
    ``entries``; nothing is re-sorted. Works level by level off a pending
    list, so key depth is not bounded by the interpreter's recursion limit.
    """
    entries = list(entries)
    for entry in entries:
        if not entry.key:
            raise InvalidKeyError(entry.key, "Object key must not be empty")

    root = _Group(name="", parent=None, entries=entries)
    created: list[_Group] = []
    pending = [root]
    while pending:
        group = pending.pop()
        group.children = _split(group)
        group.entries = []
        pending.extend(group.children)
        created.extend(group.children)

    # parents are always created before their children
    for group in reversed(created):
        group.node = Node(
            name=group.name,
            ref=group.ref,
            children=tuple(child.node for child in group.children),
        )
    return tuple(child.node for child in root.children)


@dataclass(eq=False)
class _Group:
    name: str
    parent: _Group | None
    entries: list[FlatEntry]
    ref: Any = None
    children: list[_Group] = field(default_factory=list)
    node: Node | None = None

    def full_key(self) -> str:
        names: list[str] = []
        group: _Group | None = self
        while group is not None and group.parent is not None:
            names.append(group.name)
            group = group.parent
        return join(names[::-1])


def _split(parent: _Group) -> list[_Group]:
    members: dict[str, list[FlatEntry]] = {}
    for entry in parent.entries:
        # a stripped remainder may be "" (key ended with the delimiter)
        name = first_segment(entry.key) if entry.key else ""
        members.setdefault(name, []).append(entry)

    groups: list[_Group] = []
    for name, group_entries in members.items():
        group = _Group(name=name, parent=parent, entries=[])
        found = False
        for entry in group_entries:
            if entry.key == name:
                if found:
                    raise DuplicateKeyError(group.full_key())
                group.ref, found = entry.ref, True
            else:
                group.entries.append(FlatEntry(remainder(entry.key, len(name)), entry.ref))
        groups.append(group)
    return groups


def path_of(ancestor_names: Sequence[str], node: Node) -> str:
    return join([*ancestor_names, node.name])


def walk(forest: Sequence[Node]) -> Iterator[tuple[tuple[str, ...], Node]]:
    """Yield ``(ancestor_names, node)`` pairs depth-first, parents before children."""
    stack = [((), node) for node in reversed(forest)]
    while stack:
        ancestors, node = stack.pop()
        yield ancestors, node
        child_ancestors = (*ancestors, node.name)
        stack.extend((child_ancestors, child) for child in reversed(node.children))


def find_node(forest: Sequence[Node], path: str) -> Node | None:
    current: Node | None = None
    level: Sequence[Node] = forest
    for segment in segments(path):
        current = next((node for node in level if node.name == segment), None)
        if current is None:
            return None
        level = current.children
    return current


def render_tree_text(forest: Sequence[Node], root_label: str = ".") -> str:
    lines = [root_label]
    stack = [(node, "", idx == len(forest) - 1) for idx, node in enumerate(forest)][::-1]
    while stack:
        node, prefix, is_last = stack.pop()
        branch = "`-- " if is_last else "|-- "
        label = f"{node.name}/" if node.is_directory else node.name
        if node.is_directory and node.is_object:
            label += " (object)"
        lines.append(f"{prefix}{branch}{label}")
        child_prefix = f"{prefix}{'    ' if is_last else '|   '}"
        last = len(node.children) - 1
        stack.extend((child, child_prefix, idx == last) for idx, child in reversed(list(enumerate(node.children))))
    return "\n".join(lines)
