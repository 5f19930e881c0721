import logging
from typing import Optional

import numpy as np

from boids.behaviors import (AlignmentBehavior, AvoidBox, AvoidBoxEdges, CohesionBehavior, CombinedBehavior,
                             FlockingBehavior, ReturnInsideBox, SeparationBehavior, ThrustBehavior)
from boids.boid import Boid, BoidBuilder
from boids.bvh.binary_bvh import BinaryBvh
from boids.bvh.bvh_base import Bvh, BvhType
from boids.bvh.octree import Octree
from boids.config import (BOID_MASS, BOID_MAX_FORCE, BOID_MAX_VELOCITY, BOID_MIN_VELOCITY,
                          BOID_PERCEPTION_RADIUS, BOID_SEPARATION_RADIUS, BOID_SIZE, BOUNDING_BOX,
                          CLIPPING_BOX, MAX_DELTA_TIME, OCTREE_BOUNDARY, OCTREE_MAX_DEPTH,
                          OCTREE_NODE_CAPACITY, BoidsAppDebugOptions, BoidsAppOptions)
from boids.utils.utils_vector import Vector3

logger = logging.getLogger(__name__)


def create_bvh(bvh_type: BvhType) -> Bvh:
    if bvh_type == BvhType.OCTREE:
        return Octree(OCTREE_BOUNDARY, OCTREE_NODE_CAPACITY, OCTREE_MAX_DEPTH)
    if bvh_type == BvhType.BINARY_BVH:
        return BinaryBvh()
    raise ValueError(f"未知的 BVH 類型: {bvh_type!r}")


class BoidsApp:
    """
    每一幀的流程：重建索引 -> 各行為查詢鄰居 -> 個體積分出新的速度與位置
    """
    def __init__(self, options: BoidsAppOptions = None, debug_options: BoidsAppDebugOptions = None):
        options = options or BoidsAppOptions()
        if options.boids_count < 0:
            raise ValueError(f"boids_count 不能是負數: {options.boids_count}")

        self.options = options
        self.debug_options = debug_options or BoidsAppDebugOptions()
        self.bvh_type = options.bvh_type
        self.bvh = create_bvh(options.bvh_type)
        self.boids: list[Boid] = []
        self.last_update_time: Optional[float] = None
        self.frame = 0
        self._rng = np.random.default_rng(options.seed)

        self.behavior = self._create_behavior()
        self._create_boids()
        logger.info("BoidsApp 已建立：%d 個個體，索引 %s", len(self.boids), self.bvh_type.value)

    def _create_behavior(self) -> CombinedBehavior:
        impacts = self.options.force_impacts
        separation = SeparationBehavior(self.bvh, impacts.separation, BOID_SEPARATION_RADIUS, BOUNDING_BOX)
        cohesion = CohesionBehavior(self.bvh, impacts.cohesion, BOID_PERCEPTION_RADIUS, BOUNDING_BOX)
        alignment = AlignmentBehavior(self.bvh, impacts.alignment, BOID_PERCEPTION_RADIUS, BOUNDING_BOX)

        return CombinedBehavior(
            BOID_MAX_FORCE,
            AvoidBox(impacts.avoid_box, BOID_PERCEPTION_RADIUS, BOUNDING_BOX),
            AvoidBoxEdges(impacts.avoid_box_edges, BOUNDING_BOX),
            ReturnInsideBox(impacts.return_inside_box, BOUNDING_BOX),
            FlockingBehavior(self.bvh, separation, cohesion, alignment),
            ThrustBehavior(impacts.thrust),
        )

    def _create_boids(self):
        # 在邊界框內（留出一個個體大小的邊距）隨機放置
        low = (BOUNDING_BOX.min + Vector3(1, 1, 1) * BOID_SIZE).to_array()
        high = (BOUNDING_BOX.max - Vector3(1, 1, 1) * BOID_SIZE).to_array()
        positions = self._rng.uniform(low, high, size=(self.options.boids_count, 3))
        velocities = (self._rng.random((self.options.boids_count, 3)) - 0.5) * (2 * BOID_MAX_VELOCITY)

        for position, velocity in zip(positions, velocities):
            boid = (BoidBuilder()
                    .set_velocity(Vector3.from_array(velocity), BOID_MIN_VELOCITY, BOID_MAX_VELOCITY)
                    .set_behavior(self.behavior, BOID_SIZE, BOID_MASS, CLIPPING_BOX)
                    .set_initial_position(Vector3.from_array(position))
                    .make())
            self.boids.append(boid)
            self.bvh.insert(boid)

    def reindex(self):
        """把上一幀的位置重新寫進索引；之後到下一次 reindex 之前索引不再改變"""
        if self.bvh_type == BvhType.BINARY_BVH:
            self.bvh.rebuild()
        else:
            self.bvh.clear()
            for boid in self.boids:
                self.bvh.insert(boid)

    def step(self, current_time: float) -> float:
        """
        推進一幀
        :param current_time: 目前時間（毫秒）
        :return: 實際使用的 delta time（毫秒）
        """
        if self.last_update_time is None:
            self.last_update_time = current_time

        delta_time = min(MAX_DELTA_TIME, current_time - self.last_update_time)
        self.last_update_time = current_time

        self.reindex()
        for boid in self.boids:
            boid.update(delta_time)

        self.frame += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("第 %d 幀：dt=%.1fms，索引中 %d 個個體", self.frame, delta_time, len(self.bvh))
        return delta_time

    def run(self, frames: int, frame_time: float = 1000.0 / 60.0, start_time: float = 0.0):
        """以固定的幀間隔推進 frames 幀"""
        for i in range(frames):
            self.step(start_time + i * frame_time)
