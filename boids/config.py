"""
模擬的可調參數

長度單位為世界座標，時間單位為毫秒（delta time）或秒（速度、力）
"""
import math
from dataclasses import dataclass, field
from typing import Optional

from boids.bvh.bvh_base import BvhType
from boids.utils.utils_bv import AABB3D
from boids.utils.utils_vector import Vector3


# ==============================================================================
# 空間範圍
# ==============================================================================

# 個體傾向停留在 BOUNDING_BOX 內；一旦跑出 CLIPPING_BOX，就會被送到另一側
BOUNDING_BOX = AABB3D(Vector3(-8.75, -8.75 / 2, -8.75 / 2), Vector3(8.75, 8.75 / 2, 8.75 / 2))
CLIPPING_BOX_EPSILON = 1.0
CLIPPING_BOX = AABB3D(BOUNDING_BOX.min - Vector3(1, 1, 1) * CLIPPING_BOX_EPSILON,
                      BOUNDING_BOX.max + Vector3(1, 1, 1) * CLIPPING_BOX_EPSILON)

# 個體被送回裁切框內後，與每個面保持的距離
CLIPPING_EPSILON = 0.025


# ==============================================================================
# 個體
# ==============================================================================

BOID_SIZE = 0.12
BOID_MASS = 1.2
BOID_MAX_FORCE = 1.5
BOID_PERCEPTION_RADIUS = 0.4
BOID_SEPARATION_RADIUS = 3 * BOID_SIZE / 2

# 速度低於此值時不更新朝向
BOID_MIN_VELOCITY = 1e-6
BOID_MAX_VELOCITY = 0.35

DEFAULT_DESIRED_VELOCITY = 1.0
DEFAULT_PERCEPTION_RADIUS = 1.0
DEFAULT_VIEW_ANGLE = math.pi / 3


@dataclass
class ForceImpacts:
    """各行為的力道權重"""
    avoid_box: float = 8.0
    return_inside_box: float = 8.0
    avoid_box_edges: float = 8.0
    separation: float = 3.0
    cohesion: float = 4.0
    alignment: float = 8.0
    thrust: float = 10.0


# ==============================================================================
# 時間
# ==============================================================================

# 限制每幀的 delta time，避免程式暫停很久之後一次積分過大的步長
MAX_DELTA_TIME = 200.0


# ==============================================================================
# 空間索引
# ==============================================================================

OCTREE_NODE_CAPACITY = 32
OCTREE_MAX_DEPTH = 2

# Octree 根節點必須涵蓋個體在一幀之內可能到達的所有位置
OCTREE_BOUNDARY_MARGIN = BOID_MAX_VELOCITY * MAX_DELTA_TIME * 0.001
OCTREE_BOUNDARY = AABB3D(CLIPPING_BOX.min - Vector3(1, 1, 1) * OCTREE_BOUNDARY_MARGIN,
                         CLIPPING_BOX.max + Vector3(1, 1, 1) * OCTREE_BOUNDARY_MARGIN)


@dataclass
class BoidsAppOptions:
    boids_count: int = 100
    bvh_type: BvhType = BvhType.OCTREE
    seed: Optional[int] = None
    force_impacts: ForceImpacts = field(default_factory=ForceImpacts)


@dataclass
class BoidsAppDebugOptions:
    show_bvh: bool = False
