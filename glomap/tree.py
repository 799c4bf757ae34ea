"""Breadth-first search and maximum spanning trees over the view graph."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from enum import Enum

from glomap.image import Image
from glomap.union_find import UnionFind
from glomap.view_graph import ViewGraph


class WeightType(Enum):
    """Quantity used as the edge weight of the spanning tree."""

    INLIER_NUM = 0
    INLIER_RATIO = 1


def bfs(
    graph: Sequence[Iterable[int]],
    root: int,
    banned_edges: Iterable[tuple[int, int]] = (),
) -> tuple[int, list[int]]:
    """Breadth-first search over an adjacency list.

    Returns the number of vertices reached besides the root, and the parent
    of every vertex: the root is its own parent, unreached vertices get -1.
    Banned edges are ignored in either direction.
    """
    num_vertices = len(graph)
    if not 0 <= root < num_vertices:
        raise IndexError(f"root {root} is not a vertex of a graph of {num_vertices}")

    banned: set[tuple[int, int]] = set()
    for a, b in banned_edges:
        banned.add((a, b))
        banned.add((b, a))

    parents = [-1] * num_vertices
    parents[root] = root
    visited = [False] * num_vertices
    visited[root] = True
    queue = deque([root])
    counter = 0
    while queue:
        current = queue.popleft()
        for neighbor in graph[current]:
            if (current, neighbor) in banned:
                continue
            if not visited[neighbor]:
                visited[neighbor] = True
                parents[neighbor] = current
                queue.append(neighbor)
                counter += 1
    return counter, parents


def _pair_weight(pair, weight_type: WeightType) -> float:
    if weight_type is WeightType.INLIER_RATIO:
        return float(pair.weight)
    return float(len(pair.inliers))


def maximum_spanning_tree(
    view_graph: ViewGraph,
    images: dict[int, Image],
    weight_type: WeightType,
) -> tuple[int, dict[int, int]]:
    """Spanning tree of the registered images that keeps the strongest pairs.

    Returns the root image id and the parent image id of every image reached
    from the root; the root is its own parent.
    """
    idx_to_image_id = [
        image_id for image_id, image in images.items() if image.is_registered
    ]
    if not idx_to_image_id:
        raise ValueError("no registered images to build a spanning tree from")
    image_id_to_idx = {image_id: idx for idx, image_id in enumerate(idx_to_image_id)}

    max_weight = 0.0
    for pair in view_graph.image_pairs.values():
        if pair.is_valid:
            max_weight = max(max_weight, _pair_weight(pair, weight_type))

    # Weights are flipped so that a minimum spanning tree keeps the strongest edges.
    edges: list[tuple[float, int, int]] = []
    for pair in view_graph.image_pairs.values():
        if not pair.is_valid:
            continue
        if not (
            images[pair.image_id1].is_registered
            and images[pair.image_id2].is_registered
        ):
            continue
        edges.append(
            (
                max_weight - _pair_weight(pair, weight_type),
                image_id_to_idx[pair.image_id1],
                image_id_to_idx[pair.image_id2],
            )
        )

    forest: UnionFind[int] = UnionFind()
    adjacency: list[list[int]] = [[] for _ in idx_to_image_id]
    for _, idx1, idx2 in sorted(edges, key=lambda edge: edge[0]):
        if forest.find(idx1) == forest.find(idx2):
            continue
        forest.union(idx1, idx2)
        adjacency[idx1].append(idx2)
        adjacency[idx2].append(idx1)

    _, parents_idx = bfs(adjacency, 0)
    parents = {
        idx_to_image_id[idx]: idx_to_image_id[parent]
        for idx, parent in enumerate(parents_idx)
        if parent != -1
    }
    return idx_to_image_id[0], parents