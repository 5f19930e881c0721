from boids.utils.utils_vector import Vector3


class Orientation:
    """
    個體的局部座標系：前方 (forward)、上方 (up)、側方 (side)
    """
    def __init__(self, forward: Vector3, up: Vector3):
        self.forward = forward.normalized()
        self.up = up.normalized()
        self.side = self.forward.cross(self.up)

    def update(self, new_velocity: Vector3, approximate_up: Vector3 = None):
        """
        依新的速度方向更新座標系
        :param approximate_up: 近似的上方向；預設沿用上一次的 up
        """
        self.forward = new_velocity.normalized()
        reference_up = self.up if approximate_up is None else approximate_up
        self.side = self.forward.cross(reference_up).normalized()
        self.up = self.side.cross(self.forward).normalized()

    def copy(self) -> 'Orientation':
        return Orientation(self.forward.copy(), self.up.copy())

    def __repr__(self):
        return f"Orientation(forward={self.forward}, up={self.up})"
