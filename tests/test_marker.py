import unittest

from jsonsurf.constants import CLOSER_POLICY_STRICT
from jsonsurf.marker import Marker, NestingStack


class TestMarker(unittest.TestCase):
    def test_classify_openers(self):
        marker = Marker.classify("{")
        self.assertIsNotNone(marker)
        self.assertEqual(marker.closer, "}")

        marker = Marker.classify("[")
        self.assertIsNotNone(marker)
        self.assertEqual(marker.closer, "]")

    def test_classify_non_openers(self):
        for ch in ("}", "]", "x", '"', " ", ""):
            self.assertIsNone(Marker.classify(ch))

    def test_is_counterpart(self):
        marker = Marker.classify("{")
        self.assertTrue(marker.is_counterpart("}"))
        self.assertFalse(marker.is_counterpart("]"))

        marker = Marker.classify("[")
        self.assertTrue(marker.is_counterpart("]"))
        self.assertFalse(marker.is_counterpart("}"))

    def test_marker_is_immutable(self):
        marker = Marker.classify("{")
        with self.assertRaises(Exception):
            marker.closer = "]"


class TestNestingStack(unittest.TestCase):
    def test_empty_stack_is_closed(self):
        stack = NestingStack()
        self.assertFalse(stack.is_open())
        self.assertEqual(stack.depth, 0)
        self.assertIsNone(stack.top)

    def test_push_and_close_in_order(self):
        stack = NestingStack()
        stack.push(Marker.classify("{"))
        stack.push(Marker.classify("["))
        self.assertEqual(stack.depth, 2)

        self.assertFalse(stack.close("]"))
        self.assertTrue(stack.is_open())
        self.assertTrue(stack.close("}"))
        self.assertFalse(stack.is_open())

    def test_close_without_counterpart_changes_nothing(self):
        stack = NestingStack()
        stack.push(Marker.classify("{"))
        self.assertFalse(stack.close("]"))
        self.assertEqual(stack.depth, 1)

    def test_close_on_empty_stack(self):
        stack = NestingStack()
        self.assertFalse(stack.close("}"))
        self.assertEqual(stack.depth, 0)

    def test_compat_pops_top_not_matched_marker(self):
        # '[' 在栈顶，'}' 匹配到的是下面的 '{'，但弹出的是栈顶 '['
        stack = NestingStack()
        stack.push(Marker.classify("{"))
        stack.push(Marker.classify("["))
        self.assertFalse(stack.close("}"))
        self.assertEqual(stack.depth, 1)
        self.assertEqual(stack.top.opener, "{")

    def test_strict_ignores_closer_not_matching_top(self):
        stack = NestingStack(CLOSER_POLICY_STRICT)
        stack.push(Marker.classify("{"))
        stack.push(Marker.classify("["))
        self.assertFalse(stack.close("}"))
        self.assertEqual(stack.depth, 2)
        self.assertEqual(stack.top.opener, "[")

        self.assertFalse(stack.close("]"))
        self.assertTrue(stack.close("}"))

    def test_unknown_policy_rejected(self):
        with self.assertRaises(ValueError):
            NestingStack("lenient")

    def test_clear(self):
        stack = NestingStack()
        stack.push(Marker.classify("{"))
        stack.clear()
        self.assertFalse(stack.is_open())


if __name__ == "__main__":
    unittest.main()
