import math

import pytest

from boids.app import BoidsApp, create_bvh
from boids.bvh.binary_bvh import BinaryBvh
from boids.bvh.bvh_base import BvhType
from boids.bvh.octree import Octree
from boids.config import MAX_DELTA_TIME, BoidsAppOptions


@pytest.mark.parametrize("bvh_type", [BvhType.OCTREE, BvhType.BINARY_BVH])
def test_simulation_runs_with_both_indexes(bvh_type):
    app = BoidsApp(BoidsAppOptions(boids_count=60, bvh_type=bvh_type, seed=7))
    app.run(frames=5)

    assert app.frame == 5
    for boid in app.boids:
        assert all(math.isfinite(c) for c in boid.position)
        assert all(math.isfinite(c) for c in boid.velocity)

    app.reindex()
    assert len(app.bvh) == 60
    assert {id(b) for b in app.bvh.items()} == {id(b) for b in app.boids}


def test_delta_time_is_clamped():
    app = BoidsApp(BoidsAppOptions(boids_count=3, seed=1))

    assert app.step(1000.0) == 0
    assert app.step(1016.0) == pytest.approx(16.0)
    assert app.step(60_000.0) == MAX_DELTA_TIME


def test_same_seed_gives_same_flock():
    first = BoidsApp(BoidsAppOptions(boids_count=10, seed=3))
    second = BoidsApp(BoidsAppOptions(boids_count=10, seed=3))
    assert [b.position for b in first.boids] == [b.position for b in second.boids]


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        BoidsApp(BoidsAppOptions(boids_count=-1))


def test_create_bvh():
    assert isinstance(create_bvh(BvhType.OCTREE), Octree)
    assert isinstance(create_bvh(BvhType.BINARY_BVH), BinaryBvh)
    with pytest.raises(ValueError):
        create_bvh("kd-tree")
