from boids.app import BoidsApp
from boids.boid import Boid, BoidBuilder
from boids.bvh import BinaryBvh, BvhType, Octree
from boids.config import BoidsAppDebugOptions, BoidsAppOptions

__all__ = [
    "BinaryBvh",
    "Boid",
    "BoidBuilder",
    "BoidsApp",
    "BoidsAppDebugOptions",
    "BoidsAppOptions",
    "BvhType",
    "Octree",
]
