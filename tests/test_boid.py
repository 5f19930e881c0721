import pytest

from boids.behaviors import ThrustBehavior
from boids.boid import BoidBuilder
from boids.utils.utils_bv import AABB3D
from boids.utils.utils_vector import Vector3


@pytest.fixture
def clipping_box():
    return AABB3D(Vector3(-1, -1, -1), Vector3(1, 1, 1))


def test_update_integrates_velocity():
    boid = BoidBuilder().set_velocity(Vector3(0.5, 0, 0), 0.0, 1.0).make()

    boid.update(1000)
    assert boid.position.x == pytest.approx(0.5)
    assert boid.velocity.x == pytest.approx(0.5)


def test_update_clamps_speed():
    boid = (BoidBuilder()
            .set_velocity(Vector3(0.5, 0, 0), 0.0, 1.0)
            .set_behavior(ThrustBehavior(10.0), size=0.1, mass=1.0)
            .make())

    boid.update(1000)
    assert boid.velocity.magnitude() == pytest.approx(1.0)
    assert boid.position.x == pytest.approx(1.0)


def test_boid_outside_clipping_box_wraps_to_other_side(clipping_box):
    boid = (BoidBuilder()
            .set_velocity(Vector3(1, 0, 0))
            .set_behavior(ThrustBehavior(0.0), size=0.1, clipping_box=clipping_box)
            .set_initial_position(Vector3(1.2, 0, 0))
            .make())

    assert boid.wrap_inside_clipping_box()
    assert boid.position.x == pytest.approx(-0.975)
    assert clipping_box.contains_point(boid.position)


def test_boid_whose_line_misses_clipping_box_stays_put(clipping_box):
    boid = (BoidBuilder()
            .set_velocity(Vector3(1, 0, 0))
            .set_behavior(ThrustBehavior(1.0), size=0.1, clipping_box=clipping_box)
            .set_initial_position(Vector3(1.2, 5, 0))
            .make())

    boid.update(100)
    assert boid.position == Vector3(1.2, 5, 0)


def test_orientation_follows_velocity():
    boid = BoidBuilder().set_velocity(Vector3(0, 0, 1), 0.0, 1.0).make()
    boid.velocity = Vector3(1, 0, 0)

    boid.align_with_velocity()
    assert boid.orientation.forward == Vector3(1, 0, 0)
    assert boid.orientation.up.dot(boid.orientation.forward) == pytest.approx(0)
    assert boid.orientation.up.magnitude() == pytest.approx(1)


def test_builder_copies_initial_vectors():
    start = Vector3(1, 2, 3)
    boid = BoidBuilder().set_initial_position(start).make()
    boid.position.x = 10
    assert start == Vector3(1, 2, 3)
