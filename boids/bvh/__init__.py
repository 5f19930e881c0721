from boids.bvh.binary_bvh import MIN_LEAF_NODE_SIZE, NO_NODE, BinaryBvh, BinaryBvhItemData, BinaryBvhNode
from boids.bvh.bvh_base import Bvh, BvhItem, BvhType
from boids.bvh.octree import BRUTE_FORCE_THRESHOLD, Octree, OctreeNode

__all__ = [
    "BRUTE_FORCE_THRESHOLD",
    "MIN_LEAF_NODE_SIZE",
    "NO_NODE",
    "BinaryBvh",
    "BinaryBvhItemData",
    "BinaryBvhNode",
    "Bvh",
    "BvhItem",
    "BvhType",
    "Octree",
    "OctreeNode",
]
