import math

import pytest

from boids.utils.utils_bv import AABB3D, Ray, Sphere
from boids.utils.utils_collision import (box_contained_in_sphere, box_inside_sphere, box_intersects_sphere,
                                         line_vs_box, mirror_inside_box, point_in_box, ray_vs_box,
                                         vector_from_box_boundary, vector_to_box_boundary)
from boids.utils.utils_vector import Vector3


@pytest.fixture
def unit_box():
    return AABB3D(Vector3(-1, -1, -1), Vector3(1, 1, 1))


def assert_vector_approx(actual: Vector3, expected: Vector3):
    assert actual.x == pytest.approx(expected.x)
    assert actual.y == pytest.approx(expected.y)
    assert actual.z == pytest.approx(expected.z)


def test_point_in_box_includes_boundary(unit_box):
    assert point_in_box(Vector3(0, 0, 0), unit_box)
    assert point_in_box(Vector3(1, -1, 1), unit_box)
    assert not point_in_box(Vector3(1.0001, 0, 0), unit_box)


def test_box_intersects_sphere(unit_box):
    assert box_intersects_sphere(unit_box, Sphere(Vector3(2, 0, 0), 1.0))
    assert not box_intersects_sphere(unit_box, Sphere(Vector3(2, 0, 0), 0.99))
    # 靠近角點但沒有碰到
    assert not box_intersects_sphere(unit_box, Sphere(Vector3(2, 2, 2), 1.7))
    assert box_intersects_sphere(unit_box, Sphere(Vector3(2, 2, 2), 1.75))


def test_box_inside_sphere_uses_face_distances(unit_box):
    # 六個面的距離都是 1，即使角點距離是 sqrt(3) 也判定為 True
    assert box_inside_sphere(unit_box, Sphere(Vector3(0, 0, 0), 1.0))
    assert not box_inside_sphere(unit_box, Sphere(Vector3(0, 0, 0), 0.99))
    # 球心在 AABB 外
    assert not box_inside_sphere(unit_box, Sphere(Vector3(5, 0, 0), 100.0))


def test_box_contained_in_sphere_also_checks_corners(unit_box):
    assert not box_contained_in_sphere(unit_box, Sphere(Vector3(0, 0, 0), 1.0))
    assert box_contained_in_sphere(unit_box, Sphere(Vector3(0, 0, 0), 1.75))
    assert not box_contained_in_sphere(unit_box, Sphere(Vector3(3, 0, 0), 100.0))


def test_vector_to_box_boundary_outside(unit_box):
    assert_vector_approx(vector_to_box_boundary(Vector3(3, 0, 0), unit_box), Vector3(-2, 0, 0))
    assert_vector_approx(vector_to_box_boundary(Vector3(2, 2, 0), unit_box), Vector3(-1, -1, 0))


def test_vector_to_box_boundary_inside_points_to_nearest_face(unit_box):
    assert_vector_approx(vector_to_box_boundary(Vector3(0.5, 0, 0), unit_box), Vector3(0.5, 0, 0))
    assert_vector_approx(vector_to_box_boundary(Vector3(0, -0.75, 0.1), unit_box), Vector3(0, -0.25, 0))


def test_vector_from_box_boundary_pushes_inside(unit_box):
    epsilon = 0.025
    point = Vector3(0.99, -0.99, 0)
    moved = point + vector_from_box_boundary(point, unit_box, epsilon)

    assert unit_box.max.x - moved.x >= epsilon - 1e-12
    assert moved.y - unit_box.min.y >= epsilon - 1e-12
    assert moved.z == 0


def test_vector_from_box_boundary_on_face(unit_box):
    point = Vector3(-1, 0, 1)
    moved = point + vector_from_box_boundary(point, unit_box, 0.025)
    assert_vector_approx(moved, Vector3(-0.975, 0, 0.975))


def test_vector_from_box_boundary_outside_is_zero(unit_box):
    assert vector_from_box_boundary(Vector3(2, 0, 0), unit_box, 0.1) == Vector3(0, 0, 0)


def test_mirror_inside_box(unit_box):
    assert_vector_approx(mirror_inside_box(Vector3(1.5, 0, -1.2), unit_box), Vector3(0.5, 0, -0.8))
    inside = Vector3(0.2, 0.3, 0.4)
    mirrored = mirror_inside_box(inside, unit_box)
    assert mirrored == inside
    assert mirrored is not inside


def test_line_vs_box_in_front(unit_box):
    hits = line_vs_box(Ray(Vector3(-3, 0, 0), Vector3(2, 0, 0)), unit_box)

    assert [h.distance for h in hits] == [pytest.approx(2), pytest.approx(4)]
    assert_vector_approx(hits[0].point, Vector3(-1, 0, 0))
    assert_vector_approx(hits[1].point, Vector3(1, 0, 0))


def test_line_vs_box_behind_orders_by_absolute_distance(unit_box):
    hits = line_vs_box(Ray(Vector3(3, 0, 0), Vector3(1, 0, 0)), unit_box)

    assert [h.distance for h in hits] == [pytest.approx(-2), pytest.approx(-4)]
    assert_vector_approx(hits[0].point, Vector3(1, 0, 0))
    assert_vector_approx(hits[1].point, Vector3(-1, 0, 0))


def test_line_vs_box_miss(unit_box):
    assert line_vs_box(Ray(Vector3(-3, 5, 0), Vector3(1, 0, 0)), unit_box) == []


def test_line_vs_box_zero_direction_does_not_raise(unit_box):
    hits = line_vs_box(Ray(Vector3(0, 0, 0), Vector3(0, 0, 0)), unit_box)
    assert len(hits) in (0, 2)


def test_ray_vs_box_from_outside_has_outward_normal(unit_box):
    hits = ray_vs_box(Ray(Vector3(-3, 0, 0), Vector3(1, 0, 0)), unit_box)

    assert len(hits) == 1
    assert hits[0].distance == pytest.approx(2)
    assert_vector_approx(hits[0].point, Vector3(-1, 0, 0))
    assert_vector_approx(hits[0].normal, Vector3(-1, 0, 0))


def test_ray_vs_box_from_inside_hits_exit_with_inward_normal(unit_box):
    hits = ray_vs_box(Ray(Vector3(0, 0, 0), Vector3(0, 3, 0)), unit_box)

    assert len(hits) == 1
    assert hits[0].distance == pytest.approx(1)
    assert_vector_approx(hits[0].point, Vector3(0, 1, 0))
    assert_vector_approx(hits[0].normal, Vector3(0, -1, 0))


def test_ray_vs_box_respects_max_length_and_direction(unit_box):
    assert ray_vs_box(Ray(Vector3(-3, 0, 0), Vector3(1, 0, 0)), unit_box, ray_max_length=1.5) == []
    assert ray_vs_box(Ray(Vector3(3, 0, 0), Vector3(1, 0, 0)), unit_box) == []
    assert len(ray_vs_box(Ray(Vector3(-3, 0, 0), Vector3(1, 0, 0)), unit_box, ray_max_length=math.inf)) == 1


def test_ray_vs_box_corner_normal_is_normalized(unit_box):
    hits = ray_vs_box(Ray(Vector3(-3, -3, 0), Vector3(1, 1, 0)), unit_box)

    assert len(hits) == 1
    assert hits[0].normal.magnitude() == pytest.approx(1)
    assert hits[0].normal.x < 0 and hits[0].normal.y < 0
