"""
Renderer module - the parallel scanline driver.

Implements:
- Data-parallel rendering with one independent work item per scanline
- Process, thread or in-line execution
- Independent, reproducible random streams per scanline
- Ordered reassembly of rows regardless of completion order
"""

from __future__ import annotations
import logging
import os
import platform
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from .camera import Camera
from .shapes import Hittable
from .color import save_image

logger = logging.getLogger(__name__)

EXECUTORS = ('process', 'thread', 'serial')

# Scene and camera installed in each worker process by _init_worker
_worker_state: dict = {}


def _init_worker(camera: Camera, world: Hittable) -> None:
    _worker_state['camera'] = camera
    _worker_state['world'] = world


def _render_scanline_task(j: int, seed: np.random.SeedSequence) -> tuple[int, np.ndarray]:
    camera = _worker_state['camera']
    world = _worker_state['world']
    return j, camera.render_scanline(j, world, np.random.default_rng(seed))


@dataclass
class RenderSettings:
    """Execution options for the renderer.

    Attributes:
        num_workers: Parallel workers (0 = one per CPU core)
        executor: 'process', 'thread' or 'serial'
        seed: Root seed for all sampling; None draws fresh OS entropy
    """
    num_workers: int = 0
    executor: str = 'process'
    seed: Optional[int] = None

    def __post_init__(self):
        if self.executor not in EXECUTORS:
            raise ValueError(f"Unknown executor: {self.executor!r} (expected one of {EXECUTORS})")
        if self.num_workers < 0:
            raise ValueError(f"num_workers must be non-negative, got {self.num_workers}")
        if self.num_workers == 0:
            self.num_workers = os.cpu_count() or 4


class Renderer:
    """Renders a scene through a camera, one scanline per work item."""

    def __init__(self, settings: Optional[RenderSettings] = None):
        """Create a renderer with the given settings.

        Args:
            settings: Execution configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self.scanlines_completed = 0
        self._progress_callback: Optional[Callable[[int, int], None]] = None

    def set_progress_callback(self, callback: Callable[[int, int], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Called as callback(scanlines_completed, total_scanlines)
                after every finished scanline
        """
        self._progress_callback = callback

    def render(self, world: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the encoded image.

        Args:
            world: The scene to render (any Hittable); not modified
            camera: The camera to render from

        Returns:
            uint8 image of shape (image_height, image_width, 3), rows top to bottom
        """
        camera.initialize()
        height = camera.image_height
        width = camera.image_width

        seeds = np.random.SeedSequence(self.settings.seed).spawn(height)
        image = np.zeros((height, width, 3), dtype=np.uint8)
        self.scanlines_completed = 0

        workers, mode = self.plan_workers(height)

        logger.info(
            "Rendering %dx%d, %d samples/pixel, max depth %d, %d %s worker(s)",
            width, height, camera.samples_per_pixel, camera.max_depth,
            workers, mode
        )
        start_time = time.perf_counter()

        if mode == 'serial':
            for j in range(height):
                image[j] = camera.render_scanline(j, world, np.random.default_rng(seeds[j]))
                self._scanline_done(j, height)
        else:
            with self._make_executor(mode, workers, camera, world) as executor:
                if mode == 'process':
                    futures = [executor.submit(_render_scanline_task, j, seeds[j]) for j in range(height)]
                else:
                    futures = [
                        executor.submit(self._thread_scanline, camera, world, j, seeds[j])
                        for j in range(height)
                    ]
                try:
                    for future in as_completed(futures):
                        j, row = future.result()
                        image[j] = row
                        self._scanline_done(j, height)
                except BaseException:
                    # Drop the queued scanlines instead of rendering them on shutdown
                    executor.shutdown(wait=True, cancel_futures=True)
                    raise

        logger.info("Render finished in %.2f s", time.perf_counter() - start_time)
        return image

    def plan_workers(self, height: int) -> tuple[int, str]:
        """Return the (worker count, executor) a render of `height` rows will use.

        Never more workers than scanlines; a single worker runs in-line.
        """
        workers = min(self.settings.num_workers, height)
        if workers <= 1 or self.settings.executor == 'serial':
            return 1, 'serial'
        return workers, self.settings.executor

    @staticmethod
    def _make_executor(mode: str, workers: int, camera: Camera, world: Hittable) -> Executor:
        if mode == 'process':
            return ProcessPoolExecutor(
                max_workers=workers,
                initializer=_init_worker,
                initargs=(camera, world)
            )
        return ThreadPoolExecutor(max_workers=workers)

    @staticmethod
    def _thread_scanline(
        camera: Camera, world: Hittable, j: int, seed: np.random.SeedSequence
    ) -> tuple[int, np.ndarray]:
        return j, camera.render_scanline(j, world, np.random.default_rng(seed))

    def _scanline_done(self, j: int, total: int) -> None:
        self.scanlines_completed += 1
        logger.debug("Scanline %d done (%d/%d)", j, self.scanlines_completed, total)
        if self._progress_callback:
            self._progress_callback(self.scanlines_completed, total)

    def save_image(self, image: np.ndarray, filename: Union[str, Path]) -> None:
        """Save image to file (.ppm as plain-text P3, other extensions via Pillow)."""
        save_image(image, filename)


def get_platform_info() -> dict:
    """Get information about the current platform for choosing worker counts.

    Returns:
        Dictionary with platform details
    """
    info = {
        'system': platform.system(),
        'machine': platform.machine(),
        'processor': platform.processor(),
        'python_version': platform.python_version(),
        'cpu_count': os.cpu_count(),
        'is_arm': platform.machine().lower() in ('arm64', 'aarch64'),
        'is_x86': platform.machine().lower() in ('x86_64', 'amd64', 'x86'),
    }

    info['is_apple_silicon'] = info['system'] == 'Darwin' and info['is_arm']

    return info
