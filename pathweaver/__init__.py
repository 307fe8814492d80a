"""
PathWeaver - A Python Monte Carlo Ray Tracer

Renders scenes of spheres by stochastically sampling light paths per pixel:
- Diffuse, metal and glass materials
- Anti-aliasing, depth of field and motion blur
- Scanline-parallel rendering across processes or threads
- Plain-text PPM output
"""

__version__ = "0.1.0"
__author__ = "PathWeaver Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .interval import Interval
from .shapes import HitRecord, Hittable, Sphere, HittableList
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric, reflectance
from .camera import Camera
from .color import OutputError, linear_to_gamma, to_rgb8, write_ppm, save_image
from .renderer import Renderer, RenderSettings, get_platform_info
