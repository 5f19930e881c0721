"""
固定容量的 Octree：每個節點是一個桶 (bucket)，滿了就切成 8 個等大的子節點
預期的用法是每一幀 clear() 之後把所有物件重新插入
"""
import logging
from typing import Generic, Iterator

from boids.bvh.bvh_base import TItem
from boids.utils.utils_bv import AABB3D, Sphere
from boids.utils.utils_collision import box_contained_in_sphere
from boids.utils.utils_vector import Vector3

logger = logging.getLogger(__name__)

# 子樹物件數低於此值時直接暴力檢查，不再往下遞迴
BRUTE_FORCE_THRESHOLD = 30

# 子節點中心相對於父節點中心的座標（父節點邊界視為中心在原點、大小為 (1, 1, 1)）
CHILDREN_CENTERS: list[Vector3] = [
    Vector3(1 if i % 2 == 0 else -1,
            1 if (i // 2) % 2 == 0 else -1,
            1 if (i // 4) % 2 == 0 else -1) * 0.25
    for i in range(8)
]


class OctreeNode(Generic[TItem]):
    """Octree 中的一個節點"""
    def __init__(self, boundary: AABB3D, depth: int):
        self.boundary = boundary
        self.depth = depth
        self.is_subdivided = False
        self.items: list[TItem] = []
        # 整個子樹中的物件數
        self.count = 0
        self.children: list['OctreeNode[TItem]'] = []

    def insert(self, item: TItem, capacity: int, max_depth: int) -> bool:
        """
        :return: 物件是否成功插入這個子樹
        """
        if not self.boundary.contains_point(item.position):
            return False

        if len(self.items) < capacity or self.depth >= max_depth:
            self.items.append(item)
            self.count += 1
            return True

        if not self.is_subdivided:
            self.subdivide()

        for child in self.children:
            if child.insert(item, capacity, max_depth):
                self.count += 1
                return True
        return False

    def clear(self):
        self.children = []
        self.is_subdivided = False
        self.items = []
        self.count = 0

    def subdivide(self):
        parent_size = self.boundary.size
        child_size = parent_size / 2.0
        parent_center = self.boundary.center

        self.children = [
            OctreeNode(AABB3D.centered_at(normalized_center.multiply(parent_size) + parent_center, child_size),
                       self.depth + 1)
            for normalized_center in CHILDREN_CENTERS
        ]
        self.is_subdivided = True

    def boundaries(self) -> Iterator[AABB3D]:
        nodes_to_visit: list[OctreeNode[TItem]] = [self]
        while nodes_to_visit:
            node = nodes_to_visit.pop()
            if node.is_subdivided:
                nodes_to_visit.extend(node.children)
            elif node.items:
                yield node.boundary

    def all_items(self) -> Iterator[TItem]:
        """產生整個子樹中的所有物件"""
        yield from self.items
        for child in self.children:
            if child.count > 0:
                yield from child.all_items()

    def query_items_from_sphere(self, sphere: Sphere) -> Iterator[TItem]:
        if self.count == 0 or not self.boundary.intersects_sphere(sphere):
            return

        # 1. 整個節點都在球內：不需要逐一檢查距離
        if box_contained_in_sphere(self.boundary, sphere):
            yield from self.all_items()
            return

        # 2. 子樹很小：暴力檢查比繼續遞迴便宜
        if self.count < BRUTE_FORCE_THRESHOLD:
            for item in self.all_items():
                if sphere.contains_point(item.position):
                    yield item
            return

        # 3. 檢查自己的桶，再遞迴到子節點
        for item in self.items:
            if sphere.contains_point(item.position):
                yield item
        for child in self.children:
            yield from child.query_items_from_sphere(sphere)


class Octree(Generic[TItem]):
    """
    :param boundary: 根節點邊界，必須涵蓋所有物件可能的位置，超出範圍的插入會失敗
    :param node_capacity: 深度未達 max_depth 的節點最多可存放的物件數，超過就細分
    :param max_depth: 樹高的硬上限，到達此深度的節點可以超過容量
    """
    def __init__(self, boundary: AABB3D, node_capacity: int = 4, max_depth: int = 4):
        self.root: OctreeNode[TItem] = OctreeNode(boundary, 0)
        self.node_capacity = node_capacity
        self.max_depth = max_depth

    @property
    def boundary(self) -> AABB3D:
        return self.root.boundary

    def insert(self, item: TItem) -> bool:
        inserted = self.root.insert(item, self.node_capacity, self.max_depth)
        if not inserted:
            logger.debug("Octree 插入失敗：%s 不在 %s 內", item.position, self.root.boundary)
        return inserted

    def clear(self) -> None:
        self.root.clear()

    def query_items_from_sphere(self, sphere: Sphere) -> Iterator[TItem]:
        return self.root.query_items_from_sphere(sphere)

    def boundaries(self) -> Iterator[AABB3D]:
        return self.root.boundaries()

    def items(self) -> Iterator[TItem]:
        return self.root.all_items()

    def __len__(self) -> int:
        return self.root.count

    def __repr__(self):
        return f"Octree(boundary={self.root.boundary}, count={self.root.count})"
