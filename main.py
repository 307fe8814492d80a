#!/usr/bin/env python3
"""
PathWeaver - A Python Monte Carlo Ray Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time

from pathweaver.vec3 import Vec3, Color, Point3
from pathweaver.camera import Camera
from pathweaver.shapes import Sphere, HittableList
from pathweaver.materials import Lambertian, Metal, Dielectric
from pathweaver.renderer import Renderer, RenderSettings, EXECUTORS, get_platform_info
from pathweaver.color import OutputError


def create_default_scene() -> HittableList:
    """Ground, a diffuse center sphere, hollow glass on the left and metal on the right."""
    world = HittableList()

    material_ground = Lambertian(Color(0.8, 0.8, 0.0))
    material_center = Lambertian(Color(0.1, 0.2, 0.5))
    material_left = Dielectric(1.5)
    material_right = Metal(Color(0.8, 0.6, 0.2), 0.0)

    world.add(Sphere(Point3(0.0, -100.5, -1.0), 100.0, material_ground))
    world.add(Sphere(Point3(0.0, 0.0, -1.0), 0.5, material_center))
    world.add(Sphere(Point3(-1.0, 0.0, -1.0), 0.5, material_left))
    # Negative radius flips the normals: a hollow glass bubble
    world.add(Sphere(Point3(-1.0, 0.0, -1.0), -0.4, material_left))
    world.add(Sphere(Point3(1.0, 0.0, -1.0), 0.5, material_right))

    return world


def create_motion_scene() -> HittableList:
    """Diffuse spheres bouncing upward during the shutter interval."""
    world = HittableList()

    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))

    albedos = [Color(0.7, 0.2, 0.2), Color(0.2, 0.7, 0.2), Color(0.2, 0.2, 0.7)]
    for k, albedo in enumerate(albedos):
        center = Point3(2.5 * (k - 1), 0.5, 0)
        world.add(Sphere(center, 0.5, Lambertian(albedo), center_end=center + Vec3(0, 0.25 * (k + 1), 0)))

    world.add(Sphere(Point3(0, 1, -3), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.05)))

    return world


def create_dof_scene() -> HittableList:
    """Three spheres at different depths, for depth-of-field renders."""
    world = HittableList()

    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    return world


SCENES = {
    'default': create_default_scene,
    'motion': create_motion_scene,
    'dof': create_dof_scene,
}


def create_camera(scene: str, args: argparse.Namespace) -> Camera:
    """Camera placement for each built-in scene; image options come from args."""
    common = dict(
        aspect_ratio=args.aspect,
        image_width=args.width,
        samples_per_pixel=args.samples,
        max_depth=args.depth,
    )

    if scene == 'motion':
        placement = dict(look_from=Point3(0, 2, 8), look_at=Point3(0, 0.5, 0),
                         vfov=35.0, focus_dist=8.0)
    elif scene == 'dof':
        placement = dict(look_from=Point3(13, 2, 3), look_at=Point3(0, 0, 0),
                         vfov=20.0, defocus_angle=0.6, focus_dist=10.0)
    else:
        placement = dict(look_from=Point3(-2.0, 2.0, 1.0), look_at=Point3(0.0, 0.0, -1.0),
                         vfov=40.0, focus_dist=3.4)

    if args.vfov is not None:
        placement['vfov'] = args.vfov
    if args.defocus_angle is not None:
        placement['defocus_angle'] = args.defocus_angle
    if args.focus_dist is not None:
        placement['focus_dist'] = args.focus_dist

    return Camera(vup=Vec3(0, 1, 0), **common, **placement)


def parse_aspect(value: str) -> float:
    """Accept either a number or a ratio such as 16:9 or 16/9."""
    for sep in (':', '/'):
        if sep in value:
            num, den = value.split(sep, 1)
            if float(den) == 0:
                raise ValueError(f"invalid aspect ratio: {value}")
            return float(num) / float(den)
    return float(value)


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='PathWeaver - A Python Monte Carlo Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output images/image.ppm
  python main.py --width 800 --samples 125 --depth 50 --output images/hd.ppm
  python main.py --scene dof --defocus-angle 1.0 --output images/dof.png
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--aspect', type=parse_aspect, default=16 / 9,
                        help='Aspect ratio, e.g. 16:9 or 1.5 (default: 16:9)')
    parser.add_argument('--samples', type=int, default=50, help='Samples per pixel (default: 50)')
    parser.add_argument('--depth', type=int, default=50, help='Max ray depth (default: 50)')
    parser.add_argument('--vfov', type=float, default=None, help='Vertical field of view in degrees')
    parser.add_argument('--defocus-angle', type=float, default=None, help='Defocus cone angle in degrees')
    parser.add_argument('--focus-dist', type=float, default=None, help='Distance to the focus plane')
    parser.add_argument('--workers', type=int, default=0, help='Number of workers (0=auto)')
    parser.add_argument('--executor', type=str, default='process', choices=EXECUTORS,
                        help='How scanlines run in parallel (default: process)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible renders')
    parser.add_argument('--output', type=str, default='images/image.ppm', help='Output filename')
    parser.add_argument('--scene', type=str, default='default', choices=sorted(SCENES),
                        help='Scene to render (default: default)')
    parser.add_argument('--info', action='store_true', help='Show platform info and exit')
    parser.add_argument('--verbose', action='store_true', help='Log render details')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    if args.info:
        info = get_platform_info()
        print("PathWeaver Platform Info:")
        print(f"  System: {info['system']}")
        print(f"  Machine: {info['machine']}")
        print(f"  Processor: {info['processor']}")
        print(f"  Python: {info['python_version']}")
        print(f"  CPU Cores: {info['cpu_count']}")
        print(f"  ARM: {info['is_arm']}")
        print(f"  x86: {info['is_x86']}")
        print(f"  Apple Silicon: {info['is_apple_silicon']}")
        return 0

    try:
        settings = RenderSettings(num_workers=args.workers, executor=args.executor, seed=args.seed)
        camera = create_camera(args.scene, args)
    except ValueError as e:
        parser.error(str(e))

    world = SCENES[args.scene]()

    print("=" * 60)
    print("PathWeaver Ray Tracer")
    print("=" * 60)
    camera.initialize()
    print(f"Scene: {args.scene} ({len(world)} objects)")
    print(f"  Resolution: {camera.image_width}x{camera.image_height}")
    print(f"  Samples: {camera.samples_per_pixel}")
    print(f"  Max Depth: {camera.max_depth}")
    renderer = Renderer(settings)
    workers, mode = renderer.plan_workers(camera.image_height)
    print(f"  Workers: {workers} ({mode})")

    def progress_callback(completed: int, total: int):
        progress = completed / total
        bar_len = 40
        filled = int(bar_len * progress)
        bar = '█' * filled + '░' * (bar_len - filled)
        print(f'\rScanlines: [{bar}] {completed}/{total}', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    start_time = time.time()
    image = renderer.render(world, camera)
    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    try:
        renderer.save_image(image, args.output)
    except OutputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Saved to: {args.output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
