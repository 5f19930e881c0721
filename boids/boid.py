import math

from boids.behaviors import BoidBehavior, DummyBehavior
from boids.bvh.binary_bvh import BinaryBvhItemData
from boids.config import CLIPPING_EPSILON
from boids.utils.utils_bv import INFINITE_BOX, AABB3D, Ray
from boids.utils.utils_collision import line_vs_box, vector_from_box_boundary
from boids.utils.utils_orientation import Orientation
from boids.utils.utils_vector import Vector3


class Boid:
    """
    一個群聚個體：位置、速度、朝向，以及一個產生轉向力的行為
    同時是 Octree / BinaryBvh 的物件（只需要 position 與 item_data）
    """
    def __init__(self, position: Vector3, velocity: Vector3, clipping_box: AABB3D,
                 behavior: BoidBehavior, mass: float, max_velocity: float, min_velocity: float,
                 size: float, orientation: Orientation):
        self.position = position
        self.velocity = velocity
        self.clipping_box = clipping_box
        self.behavior = behavior
        self.mass = mass
        self.max_velocity = max_velocity
        self.min_velocity = min_velocity
        self.size = size
        self.orientation = orientation

        # BinaryBvh 的連結資訊
        self.item_data = BinaryBvhItemData()

    def align_with_velocity(self):
        if self.velocity.magnitude() > self.min_velocity:
            self.orientation.update(self.velocity)

    def wrap_inside_clipping_box(self) -> bool:
        """
        個體跑出裁切框時，沿著速度方向的直線把它送到裁切框的另一側
        :return: 個體是否位於裁切框內（直線沒有碰到裁切框時為 False）
        """
        if self.clipping_box.contains_point(self.position):
            return True

        intersection_points = line_vs_box(Ray(self.position, self.velocity), self.clipping_box)
        if not intersection_points or not math.isfinite(intersection_points[-1].distance):
            return False

        far_point = intersection_points[-1].point.clamp(self.clipping_box.min, self.clipping_box.max)
        self.position = far_point + vector_from_box_boundary(far_point, self.clipping_box, CLIPPING_EPSILON)
        return True

    def update(self, dt_millis: float):
        dt_seconds = dt_millis * 0.001

        if not self.wrap_inside_clipping_box():
            return

        self.behavior.update(self)
        steering_force = self.behavior.force

        self.velocity = (self.velocity + steering_force / self.mass * dt_seconds).clamp_length(0, self.max_velocity)
        self.align_with_velocity()
        self.position = self.position + self.velocity * dt_seconds

    def __repr__(self):
        return f"Boid(position={self.position}, velocity={self.velocity})"


class BoidBuilder:
    def __init__(self):
        self.initial_position = Vector3(0, 0, 0)
        self.clipping_box = INFINITE_BOX
        self.behavior: BoidBehavior = DummyBehavior()
        self.mass = 1.0
        self.initial_velocity = Vector3(1, 0, 0)
        self.min_velocity = 0.0
        self.max_velocity = 1.0
        self.size = 1.0

    def set_velocity(self, initial_velocity: Vector3, min_velocity: float = 0.0,
                     max_velocity: float = 1.0) -> 'BoidBuilder':
        self.initial_velocity = initial_velocity
        self.min_velocity = min_velocity
        self.max_velocity = max_velocity
        return self

    def set_behavior(self, behavior: BoidBehavior, size: float, mass: float = 1.0,
                     clipping_box: AABB3D = INFINITE_BOX) -> 'BoidBuilder':
        self.behavior = behavior
        self.size = size
        self.mass = mass
        self.clipping_box = clipping_box
        return self

    def set_initial_position(self, position: Vector3) -> 'BoidBuilder':
        self.initial_position = position.copy()
        return self

    def make(self) -> Boid:
        orientation = Orientation(self.initial_velocity.copy(), Vector3(0, 1, 0))
        return Boid(self.initial_position.copy(), self.initial_velocity.copy(), self.clipping_box,
                    self.behavior, self.mass, self.max_velocity, self.min_velocity, self.size,
                    orientation)
