"""Join planning: split a containment tree into joins and deferred loads.

Joinable associations are resolved depth-first in declaration order; each
one is followed by its own joinable descendants before the next sibling.
A non-joinable association stops the join chain: it and everything below
it are loaded by a follow-up query.
"""

from __future__ import annotations

from collections.abc import Sequence

from row_orm.orm.containment import ContainNode
from row_orm.orm.plan import ContainPlan, DeferredEntry, JoinEntry


def resolve_first_level(
    nodes: Sequence[ContainNode],
    source_alias: str,
    path: tuple[str, ...] = (),
) -> list[JoinEntry]:
    entries: list[JoinEntry] = []
    for node in nodes:
        if not node.instance.can_be_joined():
            continue
        node_path = (*path, node.instance.property)
        entries.append(JoinEntry(node.instance, node.config, source_alias, node_path))
        entries.extend(resolve_first_level(node.children, node.name, node_path))
    return entries


def resolve_deferred(
    nodes: Sequence[ContainNode],
    source_alias: str,
    path: tuple[str, ...] = (),
) -> list[DeferredEntry]:
    """Collect the non-joinable nodes reachable through joinable chains.

    Non-joinable nodes below another non-joinable node are left to that
    node's own follow-up query.
    """
    entries: list[DeferredEntry] = []
    for node in nodes:
        if node.instance.can_be_joined():
            entries.extend(
                resolve_deferred(node.children, node.name, (*path, node.instance.property))
            )
        else:
            entries.append(DeferredEntry(node, source_alias, path))
    return entries


def plan_containments(nodes: Sequence[ContainNode], root_alias: str) -> ContainPlan:
    return ContainPlan(
        joins=tuple(resolve_first_level(nodes, root_alias)),
        deferred=tuple(resolve_deferred(nodes, root_alias)),
    )


def nested_deferred(node: ContainNode) -> list[ContainNode]:
    """Non-joinable nodes anywhere below *node*, depth-first.

    They are loaded by the follow-up queries of *node* and its descendants.
    """
    nodes: list[ContainNode] = []
    for child in node.children:
        if not child.instance.can_be_joined():
            nodes.append(child)
        nodes.extend(nested_deferred(child))
    return nodes
