import math

import numpy as np


class Vector3:
    """一個簡單的 3D 向量類，用於表示位置、速度和方向"""
    def __init__(self, x=0.0, y=0.0, z=0.0):
        self.x = x
        self.y = y
        self.z = z

    @staticmethod
    def from_array(array) -> 'Vector3':
        return Vector3(float(array[0]), float(array[1]), float(array[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def copy(self) -> 'Vector3':
        return Vector3(self.x, self.y, self.z)

    def component(self, index: int) -> float:
        """依索引 (0=x, 1=y, 2=z) 取得分量"""
        if index == 0:
            return self.x
        if index == 1:
            return self.y
        return self.z

    def with_component(self, index: int, value: float) -> 'Vector3':
        """返回一個替換了指定分量的新向量"""
        result = self.copy()
        if index == 0:
            result.x = value
        elif index == 1:
            result.y = value
        else:
            result.z = value
        return result

    def __add__(self, other):
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other):
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float):
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float):
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self):
        return Vector3(-self.x, -self.y, -self.z)

    def __eq__(self, other):
        if not isinstance(other, Vector3):
            return NotImplemented
        return self.x == other.x and self.y == other.y and self.z == other.z

    def __hash__(self):
        return hash((self.x, self.y, self.z))

    def multiply(self, other: 'Vector3') -> 'Vector3':
        """逐分量相乘"""
        return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)

    def dot(self, other: 'Vector3') -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: 'Vector3') -> 'Vector3':
        return Vector3(self.y * other.z - self.z * other.y,
                       self.z * other.x - self.x * other.z,
                       self.x * other.y - self.y * other.x)

    def magnitude_sq(self) -> float:
        return self.x**2 + self.y**2 + self.z**2

    def magnitude(self) -> float:
        return math.sqrt(self.magnitude_sq())

    def distance_sq_to(self, other: 'Vector3') -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return dx * dx + dy * dy + dz * dz

    def distance_to(self, other: 'Vector3') -> float:
        return math.sqrt(self.distance_sq_to(other))

    def normalized(self) -> 'Vector3':
        mag = self.magnitude()
        return self.copy() if mag == 0 else self / mag

    def clamp_length(self, min_length: float, max_length: float) -> 'Vector3':
        """將向量長度限制在 [min_length, max_length] 之間，方向不變"""
        mag = self.magnitude()
        if mag == 0:
            return self.copy()
        return self * (max(min_length, min(max_length, mag)) / mag)

    def angle_to(self, other: 'Vector3') -> float:
        """兩向量之間的夾角（弧度）；任一為零向量時返回 π/2"""
        denominator = math.sqrt(self.magnitude_sq() * other.magnitude_sq())
        if denominator == 0:
            return math.pi / 2
        cos_theta = self.dot(other) / denominator
        return math.acos(max(-1.0, min(1.0, cos_theta)))

    def min(self, other: 'Vector3') -> 'Vector3':
        return Vector3(min(self.x, other.x), min(self.y, other.y), min(self.z, other.z))

    def max(self, other: 'Vector3') -> 'Vector3':
        return Vector3(max(self.x, other.x), max(self.y, other.y), max(self.z, other.z))

    def clamp(self, low: 'Vector3', high: 'Vector3') -> 'Vector3':
        return self.max(low).min(high)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __repr__(self):
        return f"Vector3({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"
