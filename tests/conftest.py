import numpy as np
import pytest

from boids.bvh.binary_bvh import BinaryBvhItemData
from boids.utils.utils_vector import Vector3


class PointItem:
    """測試用的最小物件：位置 + BinaryBvh 連結資訊"""
    def __init__(self, x, y, z, name=None):
        self.position = Vector3(float(x), float(y), float(z))
        self.item_data = BinaryBvhItemData()
        self.name = name

    def __repr__(self):
        return f"PointItem({self.name}, {self.position})"


def make_points(array) -> list[PointItem]:
    return [PointItem(*row, name=i) for i, row in enumerate(array)]


def brute_force_query(items, center: Vector3, radius: float) -> set:
    return {id(item) for item in items if item.position.distance_sq_to(center) <= radius * radius}


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_points(rng) -> list[PointItem]:
    return make_points(rng.uniform(-5.0, 5.0, size=(800, 3)))
