import argparse
import logging
import time

from boids.app import BoidsApp
from boids.bvh.bvh_base import BvhType
from boids.config import BOUNDING_BOX, BoidsAppDebugOptions, BoidsAppOptions
from boids.utils.utils_bv import Sphere


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="3D 群聚模擬 (Octree / Binary BVH)")
    parser.add_argument("--boids", type=int, default=500, help="個體數量")
    parser.add_argument("--bvh", choices=[t.value for t in BvhType], default=BvhType.OCTREE.value,
                        help="空間索引類型")
    parser.add_argument("--frames", type=int, default=120, help="模擬的幀數")
    parser.add_argument("--frame-ms", type=float, default=1000.0 / 60.0, help="每幀的時間（毫秒）")
    parser.add_argument("--seed", type=int, default=None, help="隨機種子")
    parser.add_argument("--no-plot", action="store_true", help="不顯示 Matplotlib 視窗")
    parser.add_argument("-v", "--verbose", action="store_true", help="輸出 DEBUG 日誌")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # 1. 建立模擬
    options = BoidsAppOptions(boids_count=args.boids, bvh_type=BvhType(args.bvh), seed=args.seed)
    app = BoidsApp(options, BoidsAppDebugOptions(show_bvh=not args.no_plot))

    print(f"--- 模擬 {args.boids} 個個體，索引: {app.bvh_type.value} ---")

    # 2. 逐幀推進並計時
    frame_times = []
    for i in range(args.frames):
        start = time.perf_counter()
        app.step(i * args.frame_ms)
        frame_times.append(time.perf_counter() - start)

    if frame_times:
        average_ms = 1000 * sum(frame_times) / len(frame_times)
        print(f"-> 平均每幀 {average_ms:.2f} ms，最慢 {1000 * max(frame_times):.2f} ms")

    # 3. 最後一幀的索引狀態
    app.reindex()
    leaf_boxes = list(app.bvh.boundaries())
    print(f"-> 索引中 {len(app.bvh)} 個個體，{len(leaf_boxes)} 個葉節點")

    # 4. 抽查一次鄰居查詢
    if app.boids:
        probe = app.boids[0]
        neighbors = [b for b in app.bvh.query_items_from_sphere(Sphere(probe.position, 1.0)) if b is not probe]
        print(f"-> 第一個個體半徑 1.0 內有 {len(neighbors)} 個鄰居")

    # 5. 繪圖
    if app.debug_options.show_bvh:
        from boids.visualize import draw_scene
        draw_scene(app.boids, BOUNDING_BOX, leaf_boxes, title=f"Boids ({app.bvh_type.value})")
