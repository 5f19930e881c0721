from enum import Enum
from typing import Iterator, Protocol, TypeVar

from boids.utils.utils_bv import AABB3D, Sphere
from boids.utils.utils_vector import Vector3


class BvhItem(Protocol):
    """任何擁有 3D 位置的物件都可以放進 BVH；位置由外部更新，樹只讀取它"""
    position: Vector3


TItem = TypeVar("TItem", bound=BvhItem)


class Bvh(Protocol[TItem]):
    """兩種空間索引（Octree / BinaryBvh）共同的操作"""

    def insert(self, item: TItem): ...

    def clear(self) -> None: ...

    def query_items_from_sphere(self, sphere: Sphere) -> Iterator[TItem]:
        """產生所有位置落在球內的物件，每個物件只出現一次，順序不保證"""
        ...

    def boundaries(self) -> Iterator[AABB3D]:
        """目前有物件的葉節點邊界，供除錯繪圖使用"""
        ...

    def items(self) -> Iterator[TItem]: ...

    def __len__(self) -> int: ...


class BvhType(Enum):
    OCTREE = "octree"
    BINARY_BVH = "binary"
