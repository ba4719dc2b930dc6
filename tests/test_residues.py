"""Tests for the quadratic-residue filter."""
import sys, os
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from eta_scanner.config import SMALL_PRIMES
from eta_scanner.residues import (
    quadratic_residues, residue_mask, is_quadratic_residue, residue_filter,
    QR_MODULI, QR_MASKS,
)


class TestResidueTables(unittest.TestCase):
    def test_q7(self):
        self.assertEqual(quadratic_residues(7), [0, 1, 2, 4])

    def test_q5_mask(self):
        """QR(5) = {0, 1, 4} -> bits 0, 1, 4."""
        self.assertEqual(residue_mask(5), 0b10011)

    def test_tables_aligned(self):
        self.assertEqual(list(QR_MODULI), list(SMALL_PRIMES))
        for q, mask in zip(SMALL_PRIMES, QR_MASKS):
            self.assertEqual(int(mask), residue_mask(q))

    def test_matches_brute_force(self):
        """Every residue of every modulus agrees with exists x: x^2 = v mod q."""
        for q in SMALL_PRIMES:
            for v in range(q):
                expected = any((x * x) % q == v for x in range(q))
                self.assertEqual(is_quadratic_residue(v, q), expected,
                                 msg=f"v={v}, q={q}")

    def test_zero_qualifies(self):
        for q in SMALL_PRIMES:
            self.assertTrue(is_quadratic_residue(0, q))

    def test_residue_count(self):
        """An odd prime has (q + 1) / 2 residues including 0."""
        for q in SMALL_PRIMES:
            self.assertEqual(len(quadratic_residues(q)), (q + 1) // 2)

    def test_unknown_modulus(self):
        with self.assertRaises(ValueError):
            is_quadratic_residue(1, 31)


class TestResidueFilter(unittest.TestCase):
    def test_squares_never_rejected(self):
        for k in range(2000):
            self.assertTrue(residue_filter(k * k), msg=f"k={k}")

    def test_large_squares_never_rejected(self):
        for k in (2 ** 32 - 1, 3_039_999_999, 3_037_000_499, 2 ** 26 + 1):
            self.assertTrue(residue_filter(k * k), msg=f"k={k}")

    def test_rejects_non_residue(self):
        """2 mod 3 is not a square."""
        self.assertFalse(residue_filter(2))
        self.assertFalse(residue_filter(2 ** 64 - 2))  # 2 mod 3

    def test_most_non_squares_rejected(self):
        passed = sum(residue_filter(v) for v in range(10_000, 20_000))
        self.assertLess(passed, 1000)


if __name__ == '__main__':
    unittest.main()
