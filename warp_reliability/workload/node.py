from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Node:
    """A node of the WARP graph.

    Inside a flow's node list, `priority` is the node's position in that flow.
    In the workload's global registry, `index` is the order in which the node was first seen.
    """

    name: str
    priority: int = 0
    index: int = 0
    channel: int | None = None
