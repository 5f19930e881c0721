"""
轉向行為：每一幀讀取個體狀態（與鄰居查詢結果），計算出一個轉向力 force
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional, Sequence

from boids.bvh.bvh_base import Bvh
from boids.config import DEFAULT_DESIRED_VELOCITY, DEFAULT_PERCEPTION_RADIUS, DEFAULT_VIEW_ANGLE
from boids.utils.utils_bv import INFINITE_BOX, AABB3D, Sphere
from boids.utils.utils_collision import mirror_inside_box, vector_to_box_boundary
from boids.utils.utils_vector import Vector3

if TYPE_CHECKING:
    from boids.boid import Boid


@dataclass
class FlockingArgs:
    """
    多個行為共用的一次鄰居查詢結果
    other_boids 是以 other_boids_max_distance 為半徑查到的候選（不含個體自己）
    """
    other_boids: Sequence['Boid']
    other_boids_max_distance: float


class BoidBehavior:
    """
    :param desired_velocity: 這個力對個體的影響程度
    """
    def __init__(self, desired_velocity: float = DEFAULT_DESIRED_VELOCITY):
        self.desired_velocity = desired_velocity
        self.force = Vector3()

    def update(self, boid: 'Boid', args: Optional[FlockingArgs] = None):
        """每一幀呼叫一次，在這裡計算 self.force"""
        raise NotImplementedError


class DummyBehavior(BoidBehavior):
    """不產生任何力，作為預設值使用"""
    def update(self, boid, args=None):
        self.force = Vector3()


class CombinedBehavior(BoidBehavior):
    """
    把多個行為的力加總後縮放到 max_force
    底層行為不會收到額外參數，需要 FlockingArgs 的行為請包在 FlockingBehavior 裡
    """
    def __init__(self, max_force: float, *behaviors: BoidBehavior):
        super().__init__()
        self.max_force = max_force
        self.behaviors = list(behaviors)

    def update(self, boid, args=None):
        force = Vector3()
        for behavior in self.behaviors:
            behavior.update(boid)
            force = force + behavior.force
        self.force = force.normalized() * self.max_force


class AvoidBox(BoidBehavior):
    """快要撞上邊界框時轉向（沿著邊界框飛行的個體不受影響）"""
    def __init__(self, desired_velocity: float = DEFAULT_DESIRED_VELOCITY,
                 perception_radius: float = DEFAULT_PERCEPTION_RADIUS,
                 bounding_box: AABB3D = INFINITE_BOX):
        super().__init__(desired_velocity)
        self.perception_radius = perception_radius
        self.bounding_box = bounding_box

    def update(self, boid, args=None):
        self.force = Vector3()

        next_predicted_position = boid.position + boid.velocity.normalized() * (2 * self.perception_radius)
        if self.bounding_box.contains_point(boid.position) and \
                not self.bounding_box.contains_point(next_predicted_position):
            target = mirror_inside_box(next_predicted_position, self.bounding_box)
            desired = (target - boid.position).normalized() * self.desired_velocity
            self.force = desired - boid.velocity


class ReturnInsideBox(BoidBehavior):
    """跑出邊界框時朝中心飛回去"""
    def __init__(self, desired_velocity: float = DEFAULT_DESIRED_VELOCITY,
                 bounding_box: AABB3D = INFINITE_BOX):
        super().__init__(desired_velocity)
        self.bounding_box = bounding_box

    def update(self, boid, args=None):
        self.force = Vector3()

        if not self.bounding_box.contains_point(boid.position):
            desired = (self.bounding_box.center - boid.position).normalized() * self.desired_velocity
            self.force = desired - boid.velocity


class AvoidBoxEdges(BoidBehavior):
    """
    在邊界框內但離邊太近時往中心推，避免個體一直貼著邊界飛
    """
    def __init__(self, desired_velocity: float = DEFAULT_DESIRED_VELOCITY,
                 bounding_box: AABB3D = INFINITE_BOX):
        super().__init__(desired_velocity)
        self.bounding_box = bounding_box

    def update(self, boid, args=None):
        self.force = Vector3()

        distance_to_boundary = vector_to_box_boundary(boid.position, self.bounding_box).magnitude()
        if self.bounding_box.contains_point(boid.position) and distance_to_boundary < boid.size:
            scale_factor = 1 - distance_to_boundary / boid.size
            desired = (self.bounding_box.center - boid.position).normalized() * \
                (self.desired_velocity * scale_factor)
            self.force = desired - boid.velocity


class NeighborBehavior(BoidBehavior):
    """需要查詢鄰居的行為的共同基底"""
    def __init__(self, bvh: Bvh, desired_velocity: float = DEFAULT_DESIRED_VELOCITY,
                 perception_radius: float = DEFAULT_PERCEPTION_RADIUS,
                 bounding_box: AABB3D = INFINITE_BOX):
        super().__init__(desired_velocity)
        self.bvh = bvh
        self.perception_radius = perception_radius
        self.bounding_box = bounding_box

    def neighbors(self, boid: 'Boid', args: Optional[FlockingArgs] = None) -> Iterator['Boid']:
        """
        產生感知半徑內的其他個體
        共用的候選清單是用較小的半徑查到的時候不夠用，必須直接查詢 BVH
        """
        if args is None or self.perception_radius > args.other_boids_max_distance:
            for other in self.bvh.query_items_from_sphere(Sphere(boid.position, self.perception_radius)):
                if other is not boid:
                    yield other
            return

        same_radius = args.other_boids_max_distance == self.perception_radius
        radius_sq = self.perception_radius * self.perception_radius
        for other in args.other_boids:
            if other is boid:
                continue
            if same_radius or boid.position.distance_sq_to(other.position) <= radius_sq:
                yield other


class SeparationBehavior(NeighborBehavior):
    """依距離遠離鄰居，越近推力越大"""
    def update(self, boid, args=None):
        self.force = Vector3()

        if not self.bounding_box.contains_point(boid.position):
            return

        desired = Vector3()
        neighbors_count = 0
        for other in self.neighbors(boid, args):
            direction_from_other = boid.position - other.position
            distance_sq = direction_from_other.magnitude_sq()
            if distance_sq == 0:
                continue
            desired = desired + direction_from_other * (self.desired_velocity / distance_sq)
            neighbors_count += 1

        if neighbors_count > 0:
            self.force = desired - boid.velocity


class CohesionBehavior(NeighborBehavior):
    """
    往「看得到」的鄰居的中心靠攏：鄰居必須夠近，且位於個體的視角內
    """
    def __init__(self, bvh: Bvh, desired_velocity: float = DEFAULT_DESIRED_VELOCITY,
                 perception_radius: float = DEFAULT_PERCEPTION_RADIUS,
                 bounding_box: AABB3D = INFINITE_BOX, view_angle: float = DEFAULT_VIEW_ANGLE):
        super().__init__(bvh, desired_velocity, perception_radius, bounding_box)
        self.view_angle = view_angle

    def update(self, boid, args=None):
        self.force = Vector3()

        if not self.bounding_box.contains_point(boid.position):
            return

        neighbors_center = Vector3()
        neighbors_count = 0
        for other in self.neighbors(boid, args):
            direction_to_other = other.position - boid.position
            if direction_to_other.angle_to(boid.orientation.forward) < self.view_angle:
                neighbors_center = neighbors_center + other.position
                neighbors_count += 1

        if neighbors_count > 0:
            neighbors_center = neighbors_center / neighbors_count
            self.force = (neighbors_center - boid.position - boid.velocity).normalized() * self.desired_velocity


class AlignmentBehavior(NeighborBehavior):
    def update(self, boid, args=None):
        self.force = Vector3()

        if not self.bounding_box.contains_point(boid.position):
            return

        velocity_sum = Vector3()
        neighbors_count = 0
        for other in self.neighbors(boid, args):
            velocity_sum = velocity_sum + other.velocity
            neighbors_count += 1

        if neighbors_count > 0:
            self.force = velocity_sum / neighbors_count * self.desired_velocity


class FlockingBehavior(BoidBehavior):
    """
    分離、聚合、對齊三者的感知半徑幾乎相同，所以只用最大半徑查詢一次 BVH，
    再把候選清單分給三個行為各自過濾
    """
    def __init__(self, bvh: Bvh, separation: SeparationBehavior, cohesion: CohesionBehavior,
                 alignment: AlignmentBehavior):
        super().__init__()
        self.bvh = bvh
        self.separation = separation
        self.cohesion = cohesion
        self.alignment = alignment

    @property
    def max_perception_radius(self) -> float:
        return max(self.separation.perception_radius, self.cohesion.perception_radius,
                   self.alignment.perception_radius)

    def update(self, boid, args=None):
        self.force = Vector3()

        max_perception_radius = self.max_perception_radius
        neighbor_boids = [other for other in self.bvh.query_items_from_sphere(Sphere(boid.position, max_perception_radius))
                          if other is not boid]
        if not neighbor_boids:
            return

        shared = FlockingArgs(neighbor_boids, max_perception_radius)
        force = Vector3()
        for behavior in (self.separation, self.cohesion, self.alignment):
            behavior.update(boid, shared)
            force = force + behavior.force
        self.force = force


class ThrustBehavior(BoidBehavior):
    """沿著個體朝向前進"""
    def update(self, boid, args=None):
        self.force = boid.orientation.forward * self.desired_velocity
