import math

from boids.utils.utils_vector import Vector3


class AABB3D:
    """
    軸對齊邊界框 (Axis-Aligned Bounding Box)
    用途：BVH / Octree 節點的邊界，以及裁切區域
    約定：min <= max（逐分量），所有方法都不修改自身，而是返回新的物件
    """
    def __init__(self, min_point: Vector3, max_point: Vector3):
        self.min = min_point
        self.max = max_point

    @staticmethod
    def from_point(point: Vector3) -> 'AABB3D':
        """只包圍單一點的退化 AABB"""
        return AABB3D(point.copy(), point.copy())

    @staticmethod
    def centered_at(center: Vector3, size: Vector3) -> 'AABB3D':
        half_size = size / 2.0
        return AABB3D(center - half_size, center + half_size)

    def copy(self) -> 'AABB3D':
        return AABB3D(self.min.copy(), self.max.copy())

    def contains_point(self, point: Vector3) -> bool:
        """點是否在 AABB 內（包含邊界）"""
        return (self.min.x <= point.x <= self.max.x and
                self.min.y <= point.y <= self.max.y and
                self.min.z <= point.z <= self.max.z)

    def intersects(self, other: 'AABB3D') -> bool:
        """檢查此 AABB 是否與另一個 AABB 相交"""
        return (self.min.x <= other.max.x and self.max.x >= other.min.x) and \
               (self.min.y <= other.max.y and self.max.y >= other.min.y) and \
               (self.min.z <= other.max.z and self.max.z >= other.min.z)

    def clamp_point(self, point: Vector3) -> Vector3:
        """AABB 上（或內部）離 point 最近的點"""
        return point.clamp(self.min, self.max)

    def intersects_sphere(self, sphere: 'Sphere') -> bool:
        # 球心到 AABB 最近點的距離不超過半徑即為相交
        closest = self.clamp_point(sphere.center)
        return closest.distance_sq_to(sphere.center) <= sphere.radius * sphere.radius

    def expanded_by_point(self, point: Vector3) -> 'AABB3D':
        return AABB3D(self.min.min(point), self.max.max(point))

    def union(self, other: 'AABB3D') -> 'AABB3D':
        return AABB3D(self.min.min(other.min), self.max.max(other.max))

    @property
    def center(self) -> Vector3:
        """計算並返回 AABB 的中心點"""
        return (self.min + self.max) / 2.0

    @property
    def size(self) -> Vector3:
        return self.max - self.min

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in (*self.min, *self.max))

    def __eq__(self, other):
        if not isinstance(other, AABB3D):
            return NotImplemented
        return self.min == other.min and self.max == other.max

    def __repr__(self):
        return f"AABB3D(min={self.min}, max={self.max})"


class Sphere:
    """查詢用的球體（只作為查詢形狀，不會被存進樹裡）"""
    def __init__(self, center: Vector3, radius: float):
        self.center = center
        self.radius = radius

    def contains_point(self, point: Vector3) -> bool:
        return self.center.distance_sq_to(point) <= self.radius * self.radius

    def __repr__(self):
        return f"Sphere(center={self.center}, radius={self.radius:.2f})"


class Ray:
    """射線：起點 + 方向（方向不需要是單位向量）"""
    def __init__(self, origin: Vector3, direction: Vector3):
        self.origin = origin
        self.direction = direction

    def __repr__(self):
        return f"Ray(origin={self.origin}, direction={self.direction})"


# 「沒有裁切」時使用的無限大邊界框
INFINITE_BOX = AABB3D(Vector3(-math.inf, -math.inf, -math.inf),
                      Vector3(math.inf, math.inf, math.inf))
