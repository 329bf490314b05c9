"""Tests for the command-line renderer.

The script initializes Taichi itself when run directly; these tests reuse the
session runtime and call main() with init_backend=False.
"""

import pytest


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self):
        """Test the default settings."""
        from examples.render_room import parse_args

        args = parse_args([])

        assert (args.width, args.height, args.samples) == (240, 135, 24)
        assert args.output == "room.bmp"
        assert args.seed == 0
        assert not args.letters

    @pytest.mark.parametrize("flag", ["--width", "--height", "--samples", "--batch-size"])
    def test_rejects_non_positive(self, flag):
        """Test sizes and counts must be at least one."""
        from examples.render_room import parse_args

        with pytest.raises(SystemExit) as excinfo:
            parse_args([flag, "0"])

        assert excinfo.value.code == 2


class TestMain:
    """Test exit codes and output of main()."""

    def test_success_writes_image(self, tmp_path, capsys):
        """Test a successful render exits 0 and writes the file."""
        from examples.render_room import main

        output = tmp_path / "room.bmp"
        code = main(
            ["--width", "8", "--height", "6", "--samples", "2", "--output", str(output)],
            init_backend=False,
        )

        assert code == 0
        assert output.read_bytes()[:2] == b"BM"
        assert "Saved to" in capsys.readouterr().out

    def test_quiet_prints_nothing(self, tmp_path, capsys):
        """Test --quiet suppresses progress output."""
        from examples.render_room import main

        output = tmp_path / "room.png"
        code = main(
            ["--width", "4", "--height", "4", "--samples", "1", "--output", str(output), "--quiet"],
            init_backend=False,
        )

        assert code == 0
        assert output.exists()
        assert capsys.readouterr().out == ""

    def test_unwritable_output_exits_1(self, tmp_path, capsys):
        """Test a write failure is reported on stderr with status 1."""
        from examples.render_room import main

        output = tmp_path / "missing" / "room.bmp"
        code = main(
            ["--width", "4", "--height", "4", "--samples", "1", "--output", str(output), "--quiet"],
            init_backend=False,
        )

        assert code == 1
        assert "Failed to write image" in capsys.readouterr().err

    def test_oversized_image_exits_2(self, tmp_path):
        """Test a size beyond the render buffers exits with status 2."""
        from examples.render_room import main

        code = main(
            ["--width", "5000", "--height", "4", "--output", str(tmp_path / "x.bmp"), "--quiet"],
            init_backend=False,
        )

        assert code == 2

    def test_bad_arguments_exit_2(self):
        """Test argparse failures exit with status 2."""
        from examples.render_room import main

        with pytest.raises(SystemExit) as excinfo:
            main(["--samples", "lots"], init_backend=False)

        assert excinfo.value.code == 2

    def test_render_announced_once(self, tmp_path, capsys, caplog):
        """Test the render start is logged, not also printed to stdout."""
        import logging

        from examples.render_room import main

        caplog.set_level(logging.INFO)
        code = main(
            ["--width", "4", "--height", "4", "--samples", "2", "--output", str(tmp_path / "r.bmp")],
            init_backend=False,
        )

        assert code == 0
        assert "Rendering" not in capsys.readouterr().out
        assert sum("Rendering" in r.getMessage() for r in caplog.records) == 1
