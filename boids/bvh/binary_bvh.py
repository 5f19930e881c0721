"""
可增量維護的二元 BVH

節點存放在一個密集的陣列 (arena) 中，以整數 handle 互相參照：
父節點擁有子節點，子節點只保留指回父節點的 handle，用於刪除時向上合併
每個節點以單向鏈結串列串起直接屬於它的物件；物件本身記錄所屬節點與串列中的下一個物件

插入只會把物件掛到根節點的串列上，真正的分割發生在 rebuild()：
把整棵樹壓平回根節點，再依「最長軸 + 平均值」遞迴切分
"""
import logging
from typing import Generic, Iterator, Optional, Protocol, TypeVar

from boids.utils.utils_bv import AABB3D, Sphere
from boids.utils.utils_collision import box_contained_in_sphere
from boids.utils.utils_vector import Vector3

logger = logging.getLogger(__name__)

MIN_LEAF_NODE_SIZE = 16

# 「沒有節點」的 handle
NO_NODE = -1


class BinaryBvhItemData:
    """
    物件在 BVH 中的連結資訊
    owner_node 與 next_item 必須同時有效或同時清空：物件一次只能屬於一個節點的串列
    """
    def __init__(self):
        self.next_item = None
        self.owner_node: int = NO_NODE
        self.owner_bvh: Optional['BinaryBvh'] = None

    def reset(self):
        self.next_item = None
        self.owner_node = NO_NODE
        self.owner_bvh = None


class BinaryBvhItem(Protocol):
    position: Vector3
    item_data: BinaryBvhItemData


TItem = TypeVar("TItem", bound=BinaryBvhItem)


class BinaryBvhNode:
    """
    二元樹的節點：子樹的 AABB、自己的物件串列（頭、尾、數量），以及左右子節點與父節點的 handle
    """
    def __init__(self):
        self.first_item = None
        self.last_item = None
        self.items_count = 0
        self.left_node = NO_NODE
        self.right_node = NO_NODE
        self.parent_node = NO_NODE
        self.bounds: Optional[AABB3D] = None

    @property
    def is_leaf(self) -> bool:
        return self.left_node == NO_NODE and self.right_node == NO_NODE

    def iter_items(self) -> Iterator:
        current = self.first_item
        while current is not None:
            next_item = current.item_data.next_item
            yield current
            current = next_item

    def __repr__(self):
        return (f"BinaryBvhNode(items={self.items_count}, left={self.left_node}, "
                f"right={self.right_node}, parent={self.parent_node}, bounds={self.bounds})")


class BinaryBvh(Generic[TItem]):
    def __init__(self, min_leaf_size: int = MIN_LEAF_NODE_SIZE):
        self.min_leaf_size = min_leaf_size
        self._nodes: list[Optional[BinaryBvhNode]] = []
        self._free_handles: list[int] = []
        self._root = NO_NODE
        self._size = 0

    # ------------------------------------------------------------------
    # arena
    # ------------------------------------------------------------------

    def _allocate_node(self) -> int:
        if self._free_handles:
            handle = self._free_handles.pop()
            self._nodes[handle] = BinaryBvhNode()
            return handle
        self._nodes.append(BinaryBvhNode())
        return len(self._nodes) - 1

    def _free_node(self, handle: int):
        self._nodes[handle] = None
        self._free_handles.append(handle)

    def _compact(self):
        """只剩根節點時，把 arena 重設為 [root]"""
        root = self._nodes[self._root]
        assert root.is_leaf
        self._nodes = [root]
        self._free_handles = []
        self._root = 0
        for item in root.iter_items():
            item.item_data.owner_node = 0

    def node(self, handle: int) -> BinaryBvhNode:
        return self._nodes[handle]

    @property
    def root(self) -> int:
        return self._root

    @property
    def root_node(self) -> Optional[BinaryBvhNode]:
        return None if self._root == NO_NODE else self._nodes[self._root]

    # ------------------------------------------------------------------
    # 串列操作
    # ------------------------------------------------------------------

    def _add_item(self, handle: int, item: TItem):
        """把物件加到節點串列尾端，不擴張節點邊界"""
        assert item.item_data.next_item is None
        node = self._nodes[handle]
        if node.first_item is None:
            node.first_item = item
        else:
            node.last_item.item_data.next_item = item
        node.last_item = item
        item.item_data.owner_node = handle
        item.item_data.owner_bvh = self
        node.items_count += 1

    def _consume_list(self, handle: int, other_handle: int):
        """把 other 節點的整個串列（不含子節點）接到 handle 節點後面"""
        node = self._nodes[handle]
        other = self._nodes[other_handle]
        if other.first_item is None:
            return

        if node.first_item is None:
            node.first_item = other.first_item
        else:
            node.last_item.item_data.next_item = other.first_item
        node.last_item = other.last_item

        for item in other.iter_items():
            item.item_data.owner_node = handle

        node.items_count += other.items_count
        other.first_item = None
        other.last_item = None
        other.items_count = 0

    def _collapse_into(self, handle: int, target: int):
        """把 handle 子樹中所有物件收進 target 節點，並釋放子樹中其餘的節點"""
        nodes_to_visit = [handle]
        while nodes_to_visit:
            current = nodes_to_visit.pop()
            node = self._nodes[current]
            for child in (node.left_node, node.right_node):
                if child != NO_NODE:
                    assert self._nodes[child].parent_node == current
                    nodes_to_visit.append(child)
            node.left_node = NO_NODE
            node.right_node = NO_NODE
            if current != target:
                self._consume_list(target, current)
                self._free_node(current)

    def _recalculate_bounds(self, handle: int):
        """由自己的物件與子節點邊界重新計算緊密邊界（假設子節點邊界正確）"""
        node = self._nodes[handle]
        new_bounds: Optional[AABB3D] = None
        for item in node.iter_items():
            if new_bounds is None:
                new_bounds = AABB3D.from_point(item.position)
            else:
                new_bounds = new_bounds.expanded_by_point(item.position)

        for child in (node.left_node, node.right_node):
            if child == NO_NODE:
                continue
            child_bounds = self._nodes[child].bounds
            if child_bounds is None:
                continue
            new_bounds = child_bounds.copy() if new_bounds is None else new_bounds.union(child_bounds)

        # 空節點保留舊的邊界
        if new_bounds is not None:
            node.bounds = new_bounds

    # ------------------------------------------------------------------
    # 細分
    # ------------------------------------------------------------------

    @staticmethod
    def _longest_axis(size: Vector3) -> int:
        if size.x >= size.y and size.x >= size.z:
            return 0
        if size.y >= size.x and size.y >= size.z:
            return 1
        return 2

    def _subdivide(self, handle: int):
        """應在節點被壓平（沒有子節點）之後呼叫"""
        nodes_to_split = [handle]
        while nodes_to_split:
            current = nodes_to_split.pop()
            node = self._nodes[current]
            assert node.is_leaf

            # 兩邊各至少需要 min_leaf_size 個物件，平均值切分不保證均分，所以取 3 倍
            if node.items_count < 3 * self.min_leaf_size:
                continue

            axis = self._longest_axis(node.bounds.size)
            middle_point = sum(item.position.component(axis) for item in node.iter_items()) / node.items_count

            left = self._allocate_node()
            right = self._allocate_node()
            item = node.first_item
            while item is not None:
                next_item = item.item_data.next_item
                item.item_data.next_item = None
                if item.position.component(axis) < middle_point:
                    self._add_item(left, item)
                else:
                    self._add_item(right, item)
                item = next_item

            node.first_item = None
            node.last_item = None
            node.items_count = 0

            left_node = self._nodes[left]
            right_node = self._nodes[right]
            if left_node.items_count >= self.min_leaf_size and right_node.items_count >= self.min_leaf_size:
                node.left_node = left
                node.right_node = right
                left_node.parent_node = current
                right_node.parent_node = current
                self._recalculate_bounds(left)
                self._recalculate_bounds(right)
                nodes_to_split.append(left)
                nodes_to_split.append(right)
            else:
                # 回到切分前的狀態
                logger.debug("放棄切分：左 %d / 右 %d", left_node.items_count, right_node.items_count)
                self._consume_list(current, left)
                self._consume_list(current, right)
                self._free_node(left)
                self._free_node(right)

    # ------------------------------------------------------------------
    # 公開操作
    # ------------------------------------------------------------------

    def insert(self, item: TItem) -> None:
        """物件掛在根節點上，直到下一次 rebuild() 才會被分配到子節點"""
        if item.item_data.owner_node != NO_NODE:
            return

        if self._root == NO_NODE:
            self._root = self._allocate_node()
            self._nodes[self._root].bounds = AABB3D.from_point(item.position)
        else:
            root = self._nodes[self._root]
            root.bounds = root.bounds.expanded_by_point(item.position)

        self._add_item(self._root, item)
        self._size += 1

    def remove(self, item_to_remove: TItem) -> None:
        data = item_to_remove.item_data
        if data.owner_bvh is not self or data.owner_node == NO_NODE:
            return
        owner_handle = data.owner_node
        owner = self._nodes[owner_handle]
        if owner.items_count == 0:
            return

        # 從串列中移除（單向串列，需要找到前一個物件）
        previous_item = None
        current_item = owner.first_item
        while current_item is not None and current_item is not item_to_remove:
            previous_item = current_item
            current_item = current_item.item_data.next_item
        assert current_item is item_to_remove

        next_item = data.next_item
        if previous_item is None:
            owner.first_item = next_item
        else:
            previous_item.item_data.next_item = next_item
        if next_item is None:
            owner.last_item = previous_item
        owner.items_count -= 1
        self._size -= 1
        data.reset()

        # 葉節點的物件不足時，把父節點整個子樹合併回父節點，再往上檢查
        current = owner_handle
        while True:
            node = self._nodes[current]
            if node.items_count >= self.min_leaf_size or not node.is_leaf:
                break
            if node.parent_node == NO_NODE:
                if node.items_count == 0:
                    self._free_node(current)
                    self._root = NO_NODE
                    current = NO_NODE
                break
            parent = node.parent_node
            self._collapse_into(parent, parent)
            current = parent

        if current != NO_NODE:
            self._recalculate_bounds(current)

    def clear(self) -> None:
        for item in self.items():
            item.item_data.reset()
        self._nodes = []
        self._free_handles = []
        self._root = NO_NODE
        self._size = 0

    def rebuild(self) -> None:
        if self._root == NO_NODE:
            return
        self._collapse_into(self._root, self._root)
        self._compact()
        # 物件在兩次 rebuild 之間會移動，根節點邊界必須重新計算
        self._recalculate_bounds(self._root)
        self._subdivide(self._root)
        logger.debug("BinaryBvh rebuild：%d 個物件，%d 個節點", self._size, len(self._nodes))

    def _subtree_items(self, handle: int) -> Iterator[TItem]:
        nodes_to_visit = [handle]
        while nodes_to_visit:
            node = self._nodes[nodes_to_visit.pop()]
            if node.left_node != NO_NODE:
                nodes_to_visit.append(node.left_node)
            if node.right_node != NO_NODE:
                nodes_to_visit.append(node.right_node)
            yield from node.iter_items()

    def query_items_from_sphere(self, sphere: Sphere) -> Iterator[TItem]:
        if self._root == NO_NODE:
            return

        nodes_to_visit = [self._root]
        while nodes_to_visit:
            handle = nodes_to_visit.pop()
            node = self._nodes[handle]

            if node.bounds is None or not node.bounds.intersects_sphere(sphere):
                continue
            if box_contained_in_sphere(node.bounds, sphere):
                yield from self._subtree_items(handle)
                continue

            for item in node.iter_items():
                if sphere.contains_point(item.position):
                    yield item

            if node.left_node != NO_NODE:
                nodes_to_visit.append(node.left_node)
            if node.right_node != NO_NODE:
                nodes_to_visit.append(node.right_node)

    def leaf_nodes(self) -> Iterator[BinaryBvhNode]:
        if self._root == NO_NODE:
            return
        nodes_to_visit = [self._root]
        while nodes_to_visit:
            node = self._nodes[nodes_to_visit.pop()]
            if node.is_leaf:
                yield node
                continue
            if node.left_node != NO_NODE:
                nodes_to_visit.append(node.left_node)
            if node.right_node != NO_NODE:
                nodes_to_visit.append(node.right_node)

    def boundaries(self) -> Iterator[AABB3D]:
        for node in self.leaf_nodes():
            if node.items_count > 0 and node.bounds is not None:
                yield node.bounds

    def items(self) -> Iterator[TItem]:
        if self._root == NO_NODE:
            return iter(())
        return self._subtree_items(self._root)

    def __len__(self) -> int:
        return self._size

    def __repr__(self):
        return f"BinaryBvh(items={self._size}, nodes={len(self._nodes) - len(self._free_handles)})"
