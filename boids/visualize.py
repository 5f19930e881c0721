from typing import Iterable, Optional

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Line3DCollection

from boids.boid import Boid
from boids.utils.utils_bv import AABB3D

# AABB 的 12 條邊（以 8 個角點的索引表示，角點順序見 box_corners）
BOX_EDGES = [
    (0, 1), (1, 2), (2, 3), (3, 0),  # y = min.y 平面
    (4, 5), (5, 6), (6, 7), (7, 4),  # y = max.y 平面
    (0, 4), (1, 5), (2, 6), (3, 7),  # 連接兩個平面
]


def box_corners(box: AABB3D) -> np.ndarray:
    """AABB 的 8 個角點，形狀為 (8, 3)"""
    lo, hi = box.min, box.max
    return np.array([
        [lo.x, lo.y, hi.z], [hi.x, lo.y, hi.z], [hi.x, lo.y, lo.z], [lo.x, lo.y, lo.z],
        [lo.x, hi.y, hi.z], [hi.x, hi.y, hi.z], [hi.x, hi.y, lo.z], [lo.x, hi.y, lo.z],
    ], dtype=float)


def box_segments(boxes: Iterable[AABB3D]) -> np.ndarray:
    """把多個 AABB 轉成線段陣列，形狀為 (12 * N, 2, 3)，可直接交給 Line3DCollection"""
    segments = []
    for box in boxes:
        corners = box_corners(box)
        segments.extend((corners[a], corners[b]) for a, b in BOX_EDGES)
    if not segments:
        return np.empty((0, 2, 3), dtype=float)
    return np.array(segments, dtype=float)


def draw_scene(boids: list[Boid], bounding_box: AABB3D, bvh_boxes: Optional[Iterable[AABB3D]] = None,
               title: str = "Boids", show: bool = True):
    """使用 Matplotlib 把所有個體、邊界框，以及（可選的）BVH 葉節點邊界畫出來"""
    fig = plt.figure(figsize=(10, 10))
    ax = fig.add_subplot(projection="3d")

    # 1.個體位置與速度方向
    if boids:
        positions = np.array([b.position.to_array() for b in boids])
        velocities = np.array([b.velocity.to_array() for b in boids])
        ax.scatter(positions[:, 0], positions[:, 1], positions[:, 2], s=6, c="purple", label="Boids")
        ax.quiver(positions[:, 0], positions[:, 1], positions[:, 2],
                  velocities[:, 0], velocities[:, 1], velocities[:, 2],
                  length=0.5, normalize=True, color="purple", linewidth=0.5)

    # 2.邊界框 (黑色實線)
    ax.add_collection3d(Line3DCollection(box_segments([bounding_box]), colors="black", linewidths=1.5,
                                         label="Bounding box"))

    # 3.BVH 葉節點 (藍色虛線)
    if bvh_boxes is not None:
        segments = box_segments(bvh_boxes)
        if len(segments):
            ax.add_collection3d(Line3DCollection(segments, colors="royalblue", linestyles="--",
                                                 linewidths=0.8, label="BVH leaves"))

    margin = 0.5
    ax.set_xlim(bounding_box.min.x - margin, bounding_box.max.x + margin)
    ax.set_ylim(bounding_box.min.y - margin, bounding_box.max.y + margin)
    ax.set_zlim(bounding_box.min.z - margin, bounding_box.max.z + margin)
    ax.set_box_aspect(tuple(bounding_box.size.to_array() + 2 * margin))
    ax.set_title(title)
    plt.legend()
    if show:
        plt.show()
    return fig
