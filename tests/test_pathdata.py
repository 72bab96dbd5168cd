from __future__ import annotations

import unittest

from vector_cursors.errors import PathSyntaxError
from vector_cursors.pathdata import (
    ClosePath,
    CubicTo,
    LineTo,
    MoveTo,
    QuadTo,
    parse,
    to_path_data,
)


class PathParserTests(unittest.TestCase):
    def test_absolute_square(self) -> None:
        self.assertEqual(
            parse("M0,0 L256,0 L256,256 L0,256 Z"),
            [MoveTo(0, 0), LineTo(256, 0), LineTo(256, 256), LineTo(0, 256), ClosePath()],
        )

    def test_relative_commands_and_close_restarts_subpath(self) -> None:
        self.assertEqual(
            parse("m10 10 l5 0 h5 v5 z l1 1"),
            [
                MoveTo(10, 10),
                LineTo(15, 10),
                LineTo(20, 10),
                LineTo(20, 15),
                ClosePath(),
                MoveTo(10, 10),
                LineTo(11, 11),
            ],
        )

    def test_extra_move_to_pairs_are_line_tos(self) -> None:
        self.assertEqual(parse("M0 0 10 0 10 10"), [MoveTo(0, 0), LineTo(10, 0), LineTo(10, 10)])
        self.assertEqual(parse("m1 1 2 2"), [MoveTo(1, 1), LineTo(3, 3)])

    def test_compact_number_syntax(self) -> None:
        self.assertEqual(parse("M.5.5L1-2e1"), [MoveTo(0.5, 0.5), LineTo(1, -20)])

    def test_smooth_cubic_reflects_previous_control_point(self) -> None:
        commands = parse("M0 0 C10 0 20 10 30 10 S50 20 60 10")
        self.assertEqual(commands[2], CubicTo(40, 10, 50, 20, 60, 10))

    def test_smooth_quadratic_reflects_previous_control_point(self) -> None:
        commands = parse("M0 0 Q10 10 20 0 T40 0")
        self.assertEqual(commands[2], QuadTo(30, -10, 40, 0))

    def test_smooth_quadratic_without_previous_curve_uses_current_point(self) -> None:
        self.assertEqual(parse("M0 0 T10 0"), [MoveTo(0, 0), QuadTo(0, 0, 10, 0)])

    def test_arc_becomes_cubics_ending_at_target(self) -> None:
        commands = parse("M0 0 A50 50 0 0 1 100 0")
        self.assertEqual(len(commands), 3)
        self.assertTrue(all(isinstance(c, CubicTo) for c in commands[1:]))
        # the half circle passes through the top of the circle first
        self.assertAlmostEqual(commands[1].x, 50)
        self.assertAlmostEqual(commands[1].y, -50)
        self.assertEqual((commands[2].x, commands[2].y), (100, 0))

    def test_arc_with_compact_flags(self) -> None:
        commands = parse("M0 0a5 5 0 1050 0")
        self.assertEqual((commands[-1].x, commands[-1].y), (50, 0))

    def test_arc_is_split_into_quarter_turns(self) -> None:
        # three quarters of a circle of radius 50
        commands = parse("M0 0 A50 50 0 1 1 50 50")
        self.assertEqual(len(commands), 4)
        self.assertEqual((commands[-1].x, commands[-1].y), (50, 50))

    def test_relative_arc_after_close(self) -> None:
        commands = parse("M10 10 L20 10 Z a5 5 0 0 1 10 0")
        self.assertEqual(commands[:4], [MoveTo(10, 10), LineTo(20, 10), ClosePath(), MoveTo(10, 10)])
        self.assertEqual((commands[-1].x, commands[-1].y), (20, 10))

    def test_degenerate_arcs(self) -> None:
        self.assertEqual(parse("M0 0 A0 10 0 0 1 10 10"), [MoveTo(0, 0), LineTo(10, 10)])
        self.assertEqual(parse("M5 5 A10 10 0 0 1 5 5"), [MoveTo(5, 5)])

    def test_empty_path_has_no_commands(self) -> None:
        self.assertEqual(parse(""), [])
        self.assertEqual(parse("  \n"), [])

    def test_canonical_form_parses_to_same_commands(self) -> None:
        samples = [
            "M0,0 L256,0 L256,256 L0,256 Z",
            "m10 10 l5 0 h5 v5 z l1 1",
            "M0 0 C10 0 20 10 30 10 S50 20 60 10",
            "M0 0 Q10 10 20 0 T40 0 t10 3.25",
            "M20 20 A30 15 33 1 0 90 47.5 Z",
            "M.1.2L1e-3-4.75 z m3 3 q1 2 3 4",
        ]
        for data in samples:
            with self.subTest(data=data):
                commands = parse(data)
                self.assertEqual(parse(to_path_data(commands)), commands)


class PathSyntaxErrorTests(unittest.TestCase):
    def test_unterminated_curve(self) -> None:
        with self.assertRaises(PathSyntaxError) as ctx:
            parse("M0,0 C10,10 20,20")
        self.assertIn("C10,10 20,20", ctx.exception.fragment)
        self.assertEqual(ctx.exception.offset, 5)

    def test_unknown_command(self) -> None:
        with self.assertRaises(PathSyntaxError) as ctx:
            parse("M0 0 X5 5")
        self.assertEqual(ctx.exception.offset, 5)

    def test_path_must_start_with_move_to(self) -> None:
        with self.assertRaises(PathSyntaxError):
            parse("L5 5")
        with self.assertRaises(PathSyntaxError):
            parse("5 5")

    def test_arguments_after_close(self) -> None:
        with self.assertRaises(PathSyntaxError):
            parse("M0 0 L1 1 Z 5 5")

    def test_command_without_arguments(self) -> None:
        with self.assertRaises(PathSyntaxError):
            parse("M0 0 L L1 1")

    def test_invalid_arc_flag(self) -> None:
        with self.assertRaises(PathSyntaxError):
            parse("M0 0 A5 5 0 2 0 10 10")

    def test_stray_commas(self) -> None:
        for data in ("M0,0,", "M0 0, L1 1", "M0 0,,1 1", "M0,,0"):
            with self.subTest(data=data):
                with self.assertRaises(PathSyntaxError):
                    parse(data)
        with self.assertRaises(PathSyntaxError) as ctx:
            parse("M0,0,")
        self.assertEqual(ctx.exception.offset, 4)


if __name__ == "__main__":
    unittest.main()
