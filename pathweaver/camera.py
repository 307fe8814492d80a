"""
Camera module for generating primary rays and estimating pixel colors.

Supports:
- Perspective projection with configurable vertical field of view
- Arbitrary positioning via look-at
- Anti-aliasing by jittering samples inside each pixel
- Depth of field (defocus disk sampling)
- Motion blur (a random time sample per ray)
"""

from __future__ import annotations
import logging
import math
from typing import Optional, TYPE_CHECKING

import numpy as np

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .interval import Interval, INF
from .shapes import Hittable
from .color import to_rgb8

if TYPE_CHECKING:
    from .renderer import RenderSettings

logger = logging.getLogger(__name__)

# Lower bound of accepted hit parameters; suppresses shadow acne
T_MIN = 0.001

SKY_WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


class Camera:
    """A look-at perspective camera with depth of field and motion blur.

    Configuration is given at construction. Derived geometry (image
    height, basis vectors, pixel grid, defocus disk) is computed by
    `initialize`, which every render calls once before sampling.
    """

    def __init__(
        self,
        aspect_ratio: float = 1.0,
        image_width: int = 100,
        samples_per_pixel: int = 10,
        max_depth: int = 10,
        vfov: float = 90.0,
        look_from: Point3 = Point3(0, 0, 0),
        look_at: Point3 = Point3(0, 0, -1),
        vup: Vec3 = Vec3(0, 1, 0),
        defocus_angle: float = 0.0,
        focus_dist: float = 10.0
    ):
        """Create a camera.

        Args:
            aspect_ratio: Image width / height
            image_width: Rendered image width in pixels
            samples_per_pixel: Random samples averaged for each pixel
            max_depth: Maximum number of bounces per path
            vfov: Vertical field of view in degrees
            look_from: Camera position in world space
            look_at: Point the camera is looking at
            vup: World up vector (usually (0, 1, 0))
            defocus_angle: Cone angle in degrees of rays through each pixel (0 = pinhole)
            focus_dist: Distance from look_from to the plane of perfect focus

        Raises:
            ValueError: If any option is out of range
        """
        if aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        if image_width <= 0:
            raise ValueError(f"image_width must be positive, got {image_width}")
        if samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {samples_per_pixel}")
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        if not 0 < vfov < 180:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {vfov}")
        if defocus_angle < 0:
            raise ValueError(f"defocus_angle must be non-negative, got {defocus_angle}")
        if focus_dist <= 0:
            raise ValueError(f"focus_dist must be positive, got {focus_dist}")

        view = look_from - look_at
        if view.near_zero():
            raise ValueError("look_from and look_at must be distinct points")
        if vup.cross(view).near_zero():
            raise ValueError("vup must not be parallel to the viewing direction")

        self.aspect_ratio = aspect_ratio
        self.image_width = int(image_width)
        self.samples_per_pixel = int(samples_per_pixel)
        self.max_depth = int(max_depth)
        self.vfov = vfov
        self.look_from = look_from
        self.look_at = look_at
        self.vup = vup
        self.defocus_angle = defocus_angle
        self.focus_dist = focus_dist

        self._initialized = False

    def initialize(self) -> None:
        """Compute the derived viewport geometry from the configuration."""
        self.image_height = max(1, int(self.image_width / self.aspect_ratio))
        self.center = self.look_from

        theta = math.radians(self.vfov)
        h = math.tan(theta / 2)
        viewport_height = 2.0 * h * self.focus_dist
        viewport_width = viewport_height * self.image_width / self.image_height

        # Orthonormal camera basis
        self.w = (self.look_from - self.look_at).normalize()  # Points backward from camera
        self.u = self.vup.cross(self.w).normalize()            # Points right
        self.v = self.w.cross(self.u)                          # Points up

        # Viewport edges: across the top, and down the left side
        viewport_u = self.u * viewport_width
        viewport_v = -self.v * viewport_height

        self.pixel_delta_u = viewport_u / self.image_width
        self.pixel_delta_v = viewport_v / self.image_height

        viewport_upper_left = (
            self.center
            - self.w * self.focus_dist
            - viewport_u / 2
            - viewport_v / 2
        )
        self.pixel00_loc = viewport_upper_left + (self.pixel_delta_u + self.pixel_delta_v) * 0.5

        defocus_radius = self.focus_dist * math.tan(math.radians(self.defocus_angle / 2))
        self.defocus_disk_u = self.u * defocus_radius
        self.defocus_disk_v = self.v * defocus_radius

        self._initialized = True
        logger.debug(
            "Camera initialized: %dx%d, viewport %.4f x %.4f, defocus radius %.4f",
            self.image_width, self.image_height, viewport_width, viewport_height, defocus_radius
        )

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self.initialize()

    def pixel_center(self, i: int, j: int) -> Point3:
        """World-space center of pixel (i, j), counted from the top-left."""
        self._ensure_initialized()
        return self.pixel00_loc + self.pixel_delta_u * i + self.pixel_delta_v * j

    def get_ray(self, i: int, j: int, rng: np.random.Generator) -> Ray:
        """Generate a randomly sampled ray through pixel (i, j).

        The ray starts on the defocus disk (or at the camera center for a
        pinhole camera), passes through a random point of the pixel square
        and carries a uniform random time in [0, 1).
        """
        pixel_sample = self.pixel_center(i, j) + self._pixel_sample_square(rng)

        ray_origin = self.center if self.defocus_angle <= 0 else self._defocus_disk_sample(rng)
        ray_direction = pixel_sample - ray_origin
        ray_time = rng.random()

        return Ray(ray_origin, ray_direction, ray_time)

    def _pixel_sample_square(self, rng: np.random.Generator) -> Vec3:
        """Random offset in the square surrounding a pixel center."""
        px, py = rng.random(2) - 0.5
        return self.pixel_delta_u * px + self.pixel_delta_v * py

    def _defocus_disk_sample(self, rng: np.random.Generator) -> Point3:
        p = Vec3.random_in_unit_disk(rng)
        return self.center + self.defocus_disk_u * p.x + self.defocus_disk_v * p.y

    def ray_color(self, ray: Ray, depth: int, world: Hittable, rng: np.random.Generator) -> Color:
        """Estimate the light arriving along a ray.

        Follows the path for at most `depth` bounces, multiplying material
        attenuations along the way. A path that is absorbed or runs out of
        bounces contributes black; a path that escapes the scene picks up
        the sky gradient.
        """
        throughput = Color(1.0, 1.0, 1.0)
        ray_t = Interval(T_MIN, INF)

        for _ in range(depth):
            rec = world.hit(ray, ray_t)
            if rec is None:
                return throughput * self.sky_color(ray)

            scattered = rec.material.scatter(ray, rec, rng)
            if scattered is None:
                return Color(0, 0, 0)

            throughput = throughput * scattered.attenuation
            ray = scattered.scattered_ray

        return Color(0, 0, 0)

    @staticmethod
    def sky_color(ray: Ray) -> Color:
        """Vertical white-to-blue background gradient."""
        unit_direction = ray.direction.normalize()
        t = 0.5 * (unit_direction.y + 1.0)
        return Vec3.lerp(SKY_WHITE, SKY_BLUE, t)

    def render_scanline(self, j: int, world: Hittable, rng: np.random.Generator) -> np.ndarray:
        """Render one row of the image.

        Args:
            j: Row index, 0 at the top
            world: Scene to trace against
            rng: Random generator owned by this scanline

        Returns:
            uint8 array of shape (image_width, 3)
        """
        self._ensure_initialized()
        row = np.zeros((self.image_width, 3), dtype=np.uint8)

        for i in range(self.image_width):
            pixel_color = Color(0, 0, 0)
            for _ in range(self.samples_per_pixel):
                ray = self.get_ray(i, j, rng)
                pixel_color = pixel_color + self.ray_color(ray, self.max_depth, world, rng)
            row[i] = to_rgb8(pixel_color, self.samples_per_pixel)

        return row

    def render(self, world: Hittable, settings: Optional[RenderSettings] = None) -> np.ndarray:
        """Render the scene with a `Renderer` built from `settings`.

        Returns:
            uint8 image of shape (image_height, image_width, 3)
        """
        from .renderer import Renderer
        return Renderer(settings).render(world, self)

    def __repr__(self) -> str:
        return (f"Camera(look_from={self.look_from}, look_at={self.look_at}, "
                f"vfov={self.vfov}, image_width={self.image_width})")
