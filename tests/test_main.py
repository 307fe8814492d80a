"""Tests for the command-line entry point."""

import pytest

import main
from pathweaver.shapes import HittableList


class TestParseAspect:
    """Test aspect ratio parsing."""

    def test_ratio_forms(self):
        assert main.parse_aspect('16:9') == 16 / 9
        assert main.parse_aspect('4/3') == 4 / 3

    def test_plain_number(self):
        assert main.parse_aspect('1.5') == 1.5

    def test_invalid(self):
        with pytest.raises(ValueError):
            main.parse_aspect('wide')
        with pytest.raises(ValueError):
            main.parse_aspect('16:0')


class TestScenes:
    """Test the built-in scenes."""

    def test_default_scene(self):
        world = main.create_default_scene()
        assert isinstance(world, HittableList)
        assert len(world) == 5
        radii = sorted(obj.radius for obj in world)
        assert radii == [-0.4, 0.5, 0.5, 0.5, 100.0]

    @pytest.mark.parametrize('name', sorted(main.SCENES))
    def test_scenes_build(self, name):
        assert len(main.SCENES[name]()) > 0

    def test_motion_scene_has_moving_spheres(self):
        world = main.create_motion_scene()
        assert any(obj.is_moving for obj in world)


class TestMain:
    """Test running the renderer from the command line."""

    def test_info(self, capsys):
        assert main.main(['--info']) == 0
        assert 'CPU Cores' in capsys.readouterr().out

    def test_small_render(self, tmp_path):
        output = tmp_path / 'out' / 'image.ppm'
        code = main.main([
            '--executor', 'serial', '--width', '8', '--samples', '1',
            '--depth', '2', '--seed', '1', '--output', str(output),
        ])
        assert code == 0
        lines = output.read_text().splitlines()
        assert lines[:3] == ['P3', '8 4', '255']
        assert len(lines) == 3 + 8 * 4

    def test_seeded_renders_repeat(self, tmp_path):
        outputs = []
        for name in ('a.ppm', 'b.ppm'):
            path = tmp_path / name
            main.main(['--executor', 'serial', '--width', '6', '--samples', '2',
                       '--depth', '3', '--seed', '5', '--output', str(path)])
            outputs.append(path.read_text())
        assert outputs[0] == outputs[1]

    def test_invalid_option_exits(self):
        with pytest.raises(SystemExit):
            main.main(['--samples', '0'])

    def test_unwritable_output(self, tmp_path):
        blocker = tmp_path / 'file'
        blocker.write_text('x')
        code = main.main(['--executor', 'serial', '--width', '4', '--samples', '1',
                          '--depth', '1', '--output', str(blocker / 'image.ppm')])
        assert code == 1

    def test_reports_effective_workers(self, tmp_path, capsys):
        # Eight requested threads, but a 4-row image only has work for four
        main.main(['--executor', 'thread', '--workers', '8', '--width', '8', '--samples', '1',
                   '--depth', '1', '--seed', '2', '--output', str(tmp_path / 'image.ppm')])
        assert 'Workers: 4 (thread)' in capsys.readouterr().out

    def test_single_worker_reported_as_serial(self, tmp_path, capsys):
        main.main(['--workers', '1', '--width', '8', '--samples', '1',
                   '--depth', '1', '--output', str(tmp_path / 'image.ppm')])
        assert 'Workers: 1 (serial)' in capsys.readouterr().out
