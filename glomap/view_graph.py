"""Graph of images connected by valid image pairs."""

from __future__ import annotations

from collections import deque

from glomap.image import Image
from glomap.image_pair import ImagePair


class ViewGraph:
    """Image pairs and the connectivity they induce between images."""

    def __init__(self) -> None:
        self.image_pairs: dict[int, ImagePair] = {}
        self.num_images = 0
        self.num_pairs = 0
        self._adjacency: dict[int, set[int]] = {}
        self._components: list[set[int]] = []

    @property
    def adjacency_list(self) -> dict[int, set[int]]:
        """Neighbours of each image, as of the last adjacency update."""
        return self._adjacency

    def remove_invalid_pair(self, pair_id: int) -> None:
        self.image_pairs[pair_id].is_valid = False

    def establish_adjacency_list(self) -> None:
        """Rebuild the adjacency list from the valid pairs."""
        self._adjacency = {}
        for pair in self.image_pairs.values():
            if pair.is_valid:
                self._adjacency.setdefault(pair.image_id1, set()).add(pair.image_id2)
                self._adjacency.setdefault(pair.image_id2, set()).add(pair.image_id1)

    def _find_connected_components(self) -> list[set[int]]:
        visited: set[int] = set()
        components: list[set[int]] = []
        for image_id in self._adjacency:
            if image_id not in visited:
                components.append(self._bfs(image_id, visited))
        self._components = components
        return components

    def _bfs(self, root: int, visited: set[int]) -> set[int]:
        component = {root}
        visited.add(root)
        queue = deque([root])
        while queue:
            current = queue.popleft()
            for neighbor in self._adjacency.get(current, ()):
                if neighbor not in visited:
                    visited.add(neighbor)
                    component.add(neighbor)
                    queue.append(neighbor)
        return component

    def keep_largest_connected_components(self, images: dict[int, Image]) -> int:
        """Register only the images of the largest component.

        Pairs outside it become invalid. Returns the component's size.
        """
        self.establish_adjacency_list()
        components = self._find_connected_components()
        if not components:
            return 0
        largest = max(components, key=len)

        for image in images.values():
            image.is_registered = False
        for image_id in largest:
            if image_id in images:
                images[image_id].is_registered = True

        def registered(image_id: int) -> bool:
            image = images.get(image_id)
            return image is not None and image.is_registered

        self.num_pairs = 0
        for pair in self.image_pairs.values():
            if not registered(pair.image_id1) or not registered(pair.image_id2):
                pair.is_valid = False
            if pair.is_valid:
                self.num_pairs += 1

        self.num_images = len(largest)
        return len(largest)

    def mark_connected_components(
        self, images: dict[int, Image], min_num_img: int = -1
    ) -> int:
        """Give each image the id of its component, largest first.

        Components smaller than ``min_num_img`` and images outside any
        component get -1. Returns the number of clusters assigned.
        """
        self.establish_adjacency_list()
        components = self._find_connected_components()
        ranked = sorted(
            ((len(comp), idx) for idx, comp in enumerate(components)), reverse=True
        )

        for image in images.values():
            image.cluster_id = -1

        num_clusters = 0
        for cluster_id, (size, idx) in enumerate(ranked):
            if size < min_num_img:
                break
            for image_id in components[idx]:
                if image_id in images:
                    images[image_id].cluster_id = cluster_id
            num_clusters = cluster_id + 1
        return num_clusters