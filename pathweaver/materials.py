"""
Materials decide how light scatters off a surface.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)

Materials are frozen dataclasses: they are shared by many hit records and
copied into worker processes, and never change during a render.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .shapes import HitRecord


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered_ray: Ray


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            rec: Intersection record; its normal opposes ray_in
            rng: Random generator owned by the caller

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """


@dataclass(frozen=True)
class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    albedo: Color

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        scatter_direction = rec.normal + Vec3.random_unit_vector(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = rec.normal

        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(rec.point, scatter_direction, ray_in.time)
        )


@dataclass(frozen=True)
class Metal(Material):
    """Metallic material with specular reflection.

    Fuzz perturbs the mirror direction (0 = mirror, 1 = very rough) and is
    clamped to [0, 1]. A fuzzed reflection that ends up below the surface
    is absorbed.
    """

    albedo: Color
    fuzz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'fuzz', max(0.0, min(float(self.fuzz), 1.0)))

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        reflected = ray_in.direction.normalize().reflect(rec.normal)
        if self.fuzz > 0:
            reflected = reflected + Vec3.random_unit_vector(rng) * self.fuzz

        if reflected.dot(rec.normal) <= 0:
            return None

        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(rec.point, reflected, ray_in.time)
        )


@dataclass(frozen=True)
class Dielectric(Material):
    """Dielectric (glass-like) material with refraction.

    Attenuation is always white: the surface absorbs nothing.
    """

    ior: float = 1.5

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        # Entering the medium on the front face, leaving it otherwise
        refraction_ratio = 1.0 / self.ior if rec.front_face else self.ior

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or reflectance(cos_theta, refraction_ratio) > rng.random():
            direction = unit_direction.reflect(rec.normal)
        else:
            direction = unit_direction.refract(rec.normal, refraction_ratio)

        return ScatterResult(
            attenuation=Color(1.0, 1.0, 1.0),
            scattered_ray=Ray(rec.point, direction, ray_in.time)
        )


def reflectance(cosine: float, refraction_ratio: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1 - refraction_ratio) / (1 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)
