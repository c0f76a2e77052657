import unittest
import numpy as np
from position import Position

class TestPosition(unittest.TestCase):

    def test_construct_from_float32_vector(self):
        position = Position(np.array([1.0, -2.0, 3.5], dtype=np.float32))
        self.assertEqual((position.x, position.y, position.z), (1.0, -2.0, 3.5))
        self.assertIsInstance(position.x, float)

    def test_wrong_shape_raises(self):
        with self.assertRaises(ValueError):
            Position([1.0, 2.0])

    def test_float_view_is_single_precision(self):
        position = Position([1.5e11, 2.0, 3.0])
        self.assertEqual(position.icrs_vector_f.dtype, np.float32)
        self.assertEqual(position.icrs_vector.dtype, np.float64)

    def test_offset_from(self):
        offset = Position([10.0, 20.0, 30.0]).offset_from(Position([1.0, 2.0, 3.0]))
        self.assertEqual(offset.dtype, np.float32)
        np.testing.assert_array_equal(offset, [9.0, 18.0, 27.0])

    def test_change_by_accumulates_in_double_precision(self):
        # A single-precision coordinate at 1.5e11 m cannot resolve a 1 m step.
        position = Position([1.5e11, 0.0, 0.0])
        step = np.array([1.0, 0.5, 0.0], dtype=np.float32)
        for _ in range(1000):
            position.change_by(step)
        self.assertEqual(position.x, 1.5e11 + 1000.0)
        self.assertEqual(position.y, 500.0)
        self.assertEqual(np.float32(1.5e11) + np.float32(1.0), np.float32(1.5e11))

    def test_change_by_rejects_wrong_shape(self):
        with self.assertRaises(ValueError):
            Position([0.0, 0.0, 0.0]).change_by([1.0])

    def test_copy_is_independent(self):
        original = Position([1.0, 2.0, 3.0])
        duplicate = original.copy()
        duplicate.change_by([1.0, 0.0, 0.0])
        self.assertEqual(original.x, 1.0)
        self.assertEqual(duplicate.x, 2.0)

    def test_icrs_vector_is_a_copy(self):
        position = Position([1.0, 2.0, 3.0])
        position.icrs_vector[0] = 42.0
        position.icrs_vector_f[0] = 42.0
        self.assertEqual(position.x, 1.0)

    def test_equality(self):
        self.assertEqual(Position([1.0, 2.0, 3.0]), Position([1.0, 2.0, 3.0]))
        self.assertNotEqual(Position([1.0, 2.0, 3.0]), Position([1.0, 2.0, 3.5]))

if __name__ == '__main__':
    unittest.main()
