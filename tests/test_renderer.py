"""Tests for Renderer class."""

import os
import threading
import time

import numpy as np
import pytest

from pathweaver.vec3 import Vec3, Point3, Color
from pathweaver.camera import Camera
from pathweaver.shapes import Sphere, HittableList
from pathweaver.materials import Lambertian, Metal, Dielectric
from pathweaver.color import to_rgb8
from pathweaver.renderer import Renderer, RenderSettings, get_platform_info


def small_camera(width=8, aspect_ratio=2.0, samples=2, depth=4, **kwargs):
    return Camera(
        aspect_ratio=aspect_ratio,
        image_width=width,
        samples_per_pixel=samples,
        max_depth=depth,
        vfov=90,
        look_from=Point3(0, 0, 0),
        look_at=Point3(0, 0, -1),
        vup=Vec3(0, 1, 0),
        focus_dist=1.0,
        **kwargs
    )


def small_world():
    world = HittableList()
    world.add(Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))))
    world.add(Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))))
    world.add(Sphere(Point3(-1, 0, -1), 0.5, Dielectric(1.5)))
    world.add(Sphere(Point3(-1, 0, -1), -0.4, Dielectric(1.5)))
    world.add(Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.3)))
    return world


class TestRenderSettings:
    """Test RenderSettings configuration."""

    def test_default_values(self):
        settings = RenderSettings()
        assert settings.executor == 'process'
        assert settings.seed is None
        assert settings.num_workers == (os.cpu_count() or 4)

    def test_custom_values(self):
        settings = RenderSettings(num_workers=3, executor='thread', seed=11)
        assert settings.num_workers == 3
        assert settings.executor == 'thread'
        assert settings.seed == 11

    def test_unknown_executor(self):
        with pytest.raises(ValueError):
            RenderSettings(executor='gpu')

    def test_negative_workers(self):
        with pytest.raises(ValueError):
            RenderSettings(num_workers=-2)


class TestRendererBasic:
    """Test basic renderer functionality."""

    def test_render_produces_image(self):
        renderer = Renderer(RenderSettings(num_workers=1, seed=1))
        image = renderer.render(small_world(), small_camera())
        assert image.shape == (4, 8, 3)
        assert image.dtype == np.uint8

    def test_empty_scene_is_exact_sky(self):
        seed = 31
        camera = small_camera(width=6, aspect_ratio=1.5, samples=1)
        world = HittableList()
        image = Renderer(RenderSettings(num_workers=1, seed=seed)).render(world, camera)

        # Replay the per-scanline streams: a miss draws nothing beyond the ray itself
        seeds = np.random.SeedSequence(seed).spawn(camera.image_height)
        for j in range(camera.image_height):
            rng = np.random.default_rng(seeds[j])
            for i in range(camera.image_width):
                ray = camera.get_ray(i, j, rng)
                assert tuple(image[j, i]) == to_rgb8(Camera.sky_color(ray))

    def test_sky_gradient_top_is_bluer(self):
        camera = small_camera(width=10, aspect_ratio=1.0, samples=1)
        image = Renderer(RenderSettings(num_workers=1, seed=2)).render(HittableList(), camera)
        # Red channel fades toward the top, blue stays saturated
        assert image[0, 5, 0] < image[9, 5, 0]
        assert image[0, 5, 2] == image[9, 5, 2] == 255

    def test_zero_depth_is_black(self):
        camera = small_camera(depth=0)
        image = Renderer(RenderSettings(num_workers=1)).render(small_world(), camera)
        assert not image.any()

    def test_camera_render_convenience(self):
        camera = small_camera()
        image = camera.render(small_world(), RenderSettings(num_workers=1, seed=4))
        expected = Renderer(RenderSettings(num_workers=1, seed=4)).render(small_world(), camera)
        assert np.array_equal(image, expected)


class TestDeterminism:
    """A fixed seed reproduces the image regardless of scheduling."""

    def test_same_seed_same_image(self):
        a = Renderer(RenderSettings(num_workers=1, seed=7)).render(small_world(), small_camera())
        b = Renderer(RenderSettings(num_workers=1, seed=7)).render(small_world(), small_camera())
        assert np.array_equal(a, b)

    def test_threads_match_serial(self):
        serial = Renderer(RenderSettings(num_workers=1, seed=8)).render(small_world(), small_camera())
        threaded = Renderer(RenderSettings(num_workers=3, executor='thread', seed=8)).render(
            small_world(), small_camera()
        )
        assert np.array_equal(serial, threaded)

    def test_processes_match_serial(self):
        serial = Renderer(RenderSettings(num_workers=1, seed=9)).render(small_world(), small_camera())
        parallel = Renderer(RenderSettings(num_workers=2, executor='process', seed=9)).render(
            small_world(), small_camera()
        )
        assert np.array_equal(serial, parallel)

    def test_serial_executor_ignores_worker_count(self):
        a = Renderer(RenderSettings(num_workers=4, executor='serial', seed=10)).render(
            small_world(), small_camera()
        )
        b = Renderer(RenderSettings(num_workers=1, seed=10)).render(small_world(), small_camera())
        assert np.array_equal(a, b)


class TestRendererProgress:
    """Test renderer progress reporting."""

    def test_progress_callback(self):
        renderer = Renderer(RenderSettings(num_workers=2, executor='thread', seed=3))
        progress_values = []
        renderer.set_progress_callback(lambda done, total: progress_values.append((done, total)))

        camera = small_camera()
        renderer.render(HittableList(), camera)

        assert [done for done, _ in progress_values] == list(range(1, camera.image_height + 1))
        assert all(total == camera.image_height for _, total in progress_values)
        assert renderer.scanlines_completed == camera.image_height

    def test_counter_resets_each_render(self):
        renderer = Renderer(RenderSettings(num_workers=1))
        camera = small_camera()
        renderer.render(HittableList(), camera)
        renderer.render(HittableList(), camera)
        assert renderer.scanlines_completed == camera.image_height


class FailingCamera(Camera):
    """Fails on one scanline and counts how many scanlines were started."""

    def __init__(self, fail_row, **kwargs):
        super().__init__(**kwargs)
        self.fail_row = fail_row
        self.rows_started = 0
        self._lock = threading.Lock()

    def render_scanline(self, j, world, rng):
        with self._lock:
            self.rows_started += 1
        if j == self.fail_row:
            raise RuntimeError(f"scanline {j} failed")
        time.sleep(0.01)
        return np.zeros((self.image_width, 3), dtype=np.uint8)


class TestRendererErrors:
    """A failing scanline aborts the render."""

    def test_serial_failure_propagates(self):
        camera = FailingCamera(fail_row=2, aspect_ratio=1.0, image_width=10, look_at=Point3(0, 0, -1))
        with pytest.raises(RuntimeError):
            Renderer(RenderSettings(num_workers=1)).render(HittableList(), camera)
        assert camera.rows_started == 3

    def test_thread_failure_cancels_pending_rows(self):
        camera = FailingCamera(fail_row=0, aspect_ratio=1.0, image_width=200, look_at=Point3(0, 0, -1))
        renderer = Renderer(RenderSettings(num_workers=2, executor='thread'))

        with pytest.raises(RuntimeError, match='scanline 0'):
            renderer.render(HittableList(), camera)

        assert camera.rows_started < camera.image_height
        assert renderer.scanlines_completed < camera.image_height


class TestPlanWorkers:
    """Test the effective worker count."""

    def test_capped_by_scanlines(self):
        renderer = Renderer(RenderSettings(num_workers=16, executor='thread'))
        assert renderer.plan_workers(4) == (4, 'thread')

    def test_single_worker_runs_serially(self):
        assert Renderer(RenderSettings(num_workers=1, executor='process')).plan_workers(100) == (1, 'serial')
        assert Renderer(RenderSettings(num_workers=8, executor='process')).plan_workers(1) == (1, 'serial')

    def test_serial_executor(self):
        assert Renderer(RenderSettings(num_workers=8, executor='serial')).plan_workers(100) == (1, 'serial')


class TestRendererOutput:
    """Test writing the rendered image."""

    def test_four_by_three_ppm(self, tmp_path):
        camera = small_camera(width=4, aspect_ratio=4 / 3, samples=1, depth=2)
        renderer = Renderer(RenderSettings(num_workers=1, seed=12))
        image = renderer.render(small_world(), camera)
        path = tmp_path / 'image.ppm'

        renderer.save_image(image, path)

        lines = path.read_text().splitlines()
        assert lines[:3] == ['P3', '4 3', '255']
        triples = lines[3:]
        assert len(triples) == 12
        for line in triples:
            r, g, b = (int(v) for v in line.split())
            assert 0 <= r <= 255 and 0 <= g <= 255 and 0 <= b <= 255


class TestPlatformInfo:
    """Test platform detection."""

    def test_platform_info_structure(self):
        info = get_platform_info()
        for key in ('system', 'machine', 'processor', 'python_version',
                    'cpu_count', 'is_arm', 'is_x86', 'is_apple_silicon'):
            assert key in info

    def test_platform_detection(self):
        info = get_platform_info()
        if info['machine'].lower() in ('arm64', 'aarch64'):
            assert info['is_arm'] is True
        elif info['machine'].lower() in ('x86_64', 'amd64'):
            assert info['is_x86'] is True
