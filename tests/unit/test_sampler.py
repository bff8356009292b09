from typing import Any

import numpy as np

from shapesim.core.intersector import RayBundle, RayHits
from shapesim.core.sampler import Sampler, SamplerConfig
from shapesim.core.world import SimulationWorld
from shapesim.sensors.noise import RangeNoise


class DummyIntersector:
    def __init__(self, hits: RayHits) -> None:
        self._hits = hits

    def intersect(self, world: Any, bundle: RayBundle) -> RayHits:
        return self._hits


class DummyWriter:
    def __init__(self) -> None:
        self.batches: list = []
        self.closed = False

    def write_batch(self, batch) -> None:
        self.batches.append(batch)

    def close(self) -> None:
        self.closed = True


def test_sampler_forwards_hit_and_meta_attributes() -> None:
    origins = np.zeros((3, 3), dtype=np.float32)
    dirs = np.tile(np.array([[0.0, 0.0, -1.0]], dtype=np.float32), (3, 1))
    meta = {
        "pixel_u": np.array([0.0, 1.0, 2.0], dtype=np.float32),
        "pixel_v": np.array([5.0, 5.0, 5.0], dtype=np.float32),
    }
    bundle = RayBundle(origins=origins, directions=dirs, max_range=100.0, meta=meta)

    hits = RayHits(
        points=np.array([[0.0, 0.0, -10.0], [0.0, 0.0, -14.0]], dtype=np.float32),
        distances=np.array([10.0, 14.0], dtype=np.float32),
        ray_index=np.array([0, 2], dtype=np.int64),
        shape_ids=np.array([3, 1], dtype=np.int64),
        colors=np.array([[255, 0, 0], [0, 0, 255]], dtype=np.uint8),
        hit_count_per_ray=np.array([1, 0, 1], dtype=np.int64),
    )

    sampler = Sampler(SimulationWorld(), intersector=DummyIntersector(hits))
    writer = DummyWriter()

    stats = sampler.run_to_writer(writer, [bundle])
    assert stats == {"rays": 3, "points": 2}
    assert writer.closed
    assert len(writer.batches) == 1
    batch = writer.batches[0]
    np.testing.assert_allclose(batch.attrs["range_m"], [10.0, 14.0])
    np.testing.assert_array_equal(batch.attrs["shape_id"], [3, 1])
    np.testing.assert_array_equal(batch.attrs["rgb"], hits.colors)
    np.testing.assert_allclose(batch.attrs["pixel_u"], [0.0, 2.0])
    np.testing.assert_allclose(batch.attrs["pixel_v"], [5.0, 5.0])


def test_sampler_chunks_large_bundles() -> None:
    origins = np.zeros((5, 3), dtype=np.float32)
    dirs = np.tile(np.array([[0.0, 0.0, -1.0]], dtype=np.float32), (5, 1))
    meta = {"pixel_u": np.arange(5, dtype=np.float32)}
    bundle = RayBundle(origins=origins, directions=dirs, max_range=100.0, meta=meta)

    class RecordingIntersector:
        def __init__(self) -> None:
            self.calls: list[int] = []
            self.meta_lengths: list[int] = []

        def intersect(self, world: Any, sub_bundle: RayBundle) -> RayHits:
            self.calls.append(len(sub_bundle.origins))
            self.meta_lengths.append(len(sub_bundle.meta["pixel_u"]))
            return RayHits.empty(len(sub_bundle.origins))

    intersector = RecordingIntersector()
    sampler = Sampler(SimulationWorld(), intersector=intersector, cfg=SamplerConfig(batch_size_rays=2))
    writer = DummyWriter()

    stats = sampler.run_to_writer(writer, [bundle])
    assert intersector.calls == [2, 2, 1]
    assert intersector.meta_lengths == [2, 2, 1]
    assert stats["rays"] == 5
    assert writer.batches == []


def test_sampler_range_noise_keeps_points_on_their_rays() -> None:
    world = SimulationWorld()
    world.add_ground_level(0.0)
    origins = np.array([[0.0, 0.0, 5.0], [1.0, 2.0, 5.0]], dtype=np.float64)
    dirs = np.tile(np.array([[0.0, 0.0, -1.0]]), (2, 1))
    bundle = RayBundle(origins=origins, directions=dirs, max_range=10.0)

    sampler = Sampler(world, noise=RangeNoise(sigma_range_m=0.1), rng=np.random.default_rng(0))
    writer = DummyWriter()
    sampler.run_to_writer(writer, [bundle])

    batch = writer.batches[0]
    ranges = batch.attrs["range_m"]
    assert not np.allclose(ranges, 5.0)
    np.testing.assert_allclose(batch.xyz[:, 2], 5.0 - ranges, atol=1e-5)
    np.testing.assert_allclose(batch.xyz[:, :2], origins[:, :2], atol=1e-6)
