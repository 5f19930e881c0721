"""
AABB / 球體 / 射線的幾何工具函式，全部為無狀態的純函式

距離陣列的順序一律為：min.x, min.y, min.z, max.x, max.y, max.z
"""
import math
from dataclasses import dataclass

import numpy as np

from boids.utils.utils_bv import AABB3D, Ray, Sphere
from boids.utils.utils_vector import Vector3


# 與距離陣列順序對應的單位向量
SIGNED_UNIT_VECTORS: list[Vector3] = [
    Vector3(-1, 0, 0),
    Vector3(0, -1, 0),
    Vector3(0, 0, -1),
    Vector3(1, 0, 0),
    Vector3(0, 1, 0),
    Vector3(0, 0, 1),
]


@dataclass
class LineIntersectionPoint:
    point: Vector3
    distance: float


@dataclass
class RayIntersectionPoint:
    point: Vector3
    normal: Vector3
    distance: float


# ==============================================================================
# 點 / 球體 vs AABB
# ==============================================================================


def signed_distances_to_box_sides(point: Vector3, box: AABB3D) -> list[float]:
    """點座標減去 AABB 的 min / max 座標（有號距離）"""
    return [point.x - box.min.x, point.y - box.min.y, point.z - box.min.z,
            point.x - box.max.x, point.y - box.max.y, point.z - box.max.z]


def distances_to_box_sides(point: Vector3, box: AABB3D) -> list[float]:
    return [abs(d) for d in signed_distances_to_box_sides(point, box)]


def point_in_box(point: Vector3, box: AABB3D) -> bool:
    return box.contains_point(point)


def box_intersects_sphere(box: AABB3D, sphere: Sphere) -> bool:
    return box.intersects_sphere(sphere)


def box_inside_sphere(box: AABB3D, sphere: Sphere) -> bool:
    """
    保守的「AABB 完全在球內」檢查：球心必須在 AABB 內，且球心到六個面的距離都不超過半徑
    注意：這不等同於「八個角點都在球內」，請勿改成角點檢查
    """
    if not box.contains_point(sphere.center):
        return False

    for distance in distances_to_box_sides(sphere.center, box):
        if distance > sphere.radius:
            return False
    return True


def box_contained_in_sphere(box: AABB3D, sphere: Sphere) -> bool:
    """
    查詢時「整個節點都在球內」的快速路徑條件：box_inside_sphere 成立，且最遠的角點也在球內
    只有在這個條件下才能不逐一檢查距離而直接回傳節點內的所有物件
    """
    if not box_inside_sphere(box, sphere):
        return False

    center = sphere.center
    dx = max(center.x - box.min.x, box.max.x - center.x)
    dy = max(center.y - box.min.y, box.max.y - center.y)
    dz = max(center.z - box.min.z, box.max.z - center.z)
    return dx * dx + dy * dy + dz * dz <= sphere.radius * sphere.radius


def vector_to_box_boundary(point: Vector3, box: AABB3D) -> Vector3:
    """
    返回指向 AABB 表面最近點的向量
    點在外部時指向夾取後的最近點；點在內部時指向最近的面
    """
    if not box.contains_point(point):
        return box.clamp_point(point) - point

    distances = distances_to_box_sides(point, box)
    i_min = 0
    min_distance = distances[0]
    for i in range(1, len(distances)):
        if min_distance > distances[i]:
            i_min = i
            min_distance = distances[i]

    return SIGNED_UNIT_VECTORS[i_min] * min_distance


def vector_from_box_boundary(point: Vector3, box: AABB3D, epsilon_distance: float) -> Vector3:
    """
    返回一個指向 AABB 內部的向量：point 加上它之後，與每個過近的面至少相距 epsilon_distance
    點不在 AABB 內（或邊界上）時返回零向量
    """
    result = Vector3()
    if not box.contains_point(point):
        return result

    signed_distances = signed_distances_to_box_sides(point, box)
    for i, signed_distance in enumerate(signed_distances):
        if abs(signed_distance) > epsilon_distance:
            continue
        result = result + SIGNED_UNIT_VECTORS[i] * (signed_distance - epsilon_distance)
    return result


def mirror_inside_box(point: Vector3, box: AABB3D) -> Vector3:
    """
    點跑出 AABB 時，將超出的部分沿著被穿越的面鏡射回內部（各軸獨立處理）
    點在內部時原樣返回（複本）
    """
    if box.contains_point(point):
        return point.copy()

    mirrored = Vector3()
    signed_distances = signed_distances_to_box_sides(point, box)
    for i, signed_distance in enumerate(signed_distances):
        if i < 3 and signed_distance < 0:
            mirrored = mirrored.with_component(i, -2 * signed_distance)
        if i >= 3 and signed_distance > 0:
            mirrored = mirrored.with_component(i % 3, -2 * signed_distance)
    return mirrored + point


# ==============================================================================
# 射線 / 直線 vs AABB (slab method)
# ==============================================================================


def _slab_interval(origin: Vector3, direction: Vector3, box: AABB3D) -> tuple[Vector3, float, float]:
    """
    以 slab method 求直線進入 / 離開 AABB 的參數 t_near, t_far
    方向分量為 0 時得到 ±inf 或 NaN，不拋出例外
    """
    normalized = direction.normalized()
    d = normalized.to_array()
    o = origin.to_array()
    with np.errstate(divide="ignore", invalid="ignore"):
        near = (box.min.to_array() - o) / d
        far = (box.max.to_array() - o) / d
    t_near = float(np.max(np.minimum(near, far)))
    t_far = float(np.min(np.maximum(near, far)))
    return normalized, t_near, t_far


def line_vs_box(line: Ray, box: AABB3D) -> list[LineIntersectionPoint]:
    """
    無限長直線與 AABB 的交點，不考慮交點是否在「起點」之後
    返回 0 或 2 個交點，依 |t| 由近到遠排序
    """
    direction, t_near, t_far = _slab_interval(line.origin, line.direction, box)

    if t_near > t_far:
        return []

    if abs(t_near) > abs(t_far):
        t_near, t_far = t_far, t_near

    return [
        LineIntersectionPoint(line.origin + direction * t_near, t_near),
        LineIntersectionPoint(line.origin + direction * t_far, t_far),
    ]


def ray_vs_box(ray: Ray, box: AABB3D, ray_max_length: float = math.inf,
               epsilon: float = 1e-3) -> list[RayIntersectionPoint]:
    """
    有方向、有最大長度的射線與 AABB 的最近交點（0 或 1 個）
    起點在 AABB 外時法線朝外，起點在內部時（交點為出口）法線朝內
    """
    direction, t_near, t_far = _slab_interval(ray.origin, ray.direction, box)

    if t_near > t_far or t_far < 0:
        return []

    distance = t_near if t_near > 0 else t_far
    if distance > ray_max_length:
        return []

    closest_intersection = ray.origin + direction * distance

    # 以 AABB 中心為原點的座標
    box_center = box.center
    from_center = closest_intersection - box_center
    box_min = box.min - box_center
    box_max = box.max - box_center

    normal = Vector3()
    for axis in range(3):
        if abs(from_center.component(axis) - box_min.component(axis)) < epsilon:
            normal = normal + SIGNED_UNIT_VECTORS[axis + 3]
        if abs(from_center.component(axis) - box_max.component(axis)) < epsilon:
            normal = normal + SIGNED_UNIT_VECTORS[axis]
    normal = normal.normalized() * (1 if box.contains_point(ray.origin) else -1)

    return [RayIntersectionPoint(closest_intersection, normal, distance)]
