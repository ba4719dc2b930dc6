"""GPU backend checks against the CPU backend. Skipped without CUDA."""
import sys, os
import unittest
from unittest import mock

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from eta_scanner.core import gpu_available, search
from eta_scanner.config import ETA_SAFETY_CEILING, NOT_FOUND, UINT64_MAX
from eta_scanner.validate import cross_validate
from eta_scanner.candidates import evaluate
from eta_scanner.residues import QR_MODULI, QR_MASKS
from eta_scanner.verify import perfect_square

HAVE_GPU = gpu_available()


class TestDeviceBodiesMatchCpu(unittest.TestCase):
    """The CUDA device functions, run as plain Python, agree with the CPU kernels."""

    def setUp(self):
        from eta_scanner.gpu import solvers as gpu_solvers
        self.gpu_solvers = gpu_solvers
        self.is_square = gpu_solvers._is_square_dev.py_func
        self.passes = gpu_solvers._candidate_passes_dev.py_func

    def test_is_square(self):
        values = list(range(3000))
        for k in (2 ** 26 + 1, 3_037_000_499, 3_039_999_999, 2 ** 32 - 1):
            values += [k * k - 1, k * k, k * k + 1]
        values.append(UINT64_MAX)
        for v in values:
            if v > UINT64_MAX:
                continue
            self.assertEqual(bool(self.is_square(np.uint64(v))), perfect_square(v),
                             msg=f"v={v}")

    def test_candidate_passes(self):
        c = ETA_SAFETY_CEILING
        cases = [(T, eta) for T in (3, 4, 7, 3991) for eta in range(1, 200)]
        cases += [(4 * c + 3, c), (4 * c + 3, c + 1), (4 * c - 1, c),
                  (UINT64_MAX - 8, 1), (UINT64_MAX - 8, 2), (3, NOT_FOUND)]
        with mock.patch.object(self.gpu_solvers, '_is_square_dev', self.is_square):
            for T, eta in cases:
                got = bool(self.passes(np.uint64(eta), np.uint64(T), QR_MODULI, QR_MASKS))
                self.assertEqual(got, evaluate(T, eta), msg=f"T={T} eta={eta}")


@unittest.skipUnless(HAVE_GPU, "no CUDA device")
class TestGpuSearch(unittest.TestCase):
    def test_t3(self):
        result = search(3, 10, backend='gpu').unwrap()
        self.assertEqual(result.eta, 1)
        self.assertIsNotNone(result.compute_capability)

    def test_matches_cpu(self):
        for T, n_max in [(4, 10_000), (3991, 1200), (1023, 5000)]:
            cpu = search(T, n_max, backend='cpu').eta
            gpu = search(T, n_max, backend='gpu', chunk_size=256).unwrap().eta
            self.assertEqual(gpu, cpu, msg=f"T={T}")

    def test_boundaries(self):
        from eta_scanner.gpu.solvers import scan_chunk
        c = ETA_SAFETY_CEILING
        self.assertEqual(scan_chunk(4 * c + 3, c, 2), NOT_FOUND)
        self.assertEqual(scan_chunk(4 * c - 1, c, 2), c)
        self.assertEqual(scan_chunk(UINT64_MAX - 8, 1, 10), NOT_FOUND)

    def test_cross_validate(self):
        result = cross_validate(backend='gpu', chunk_sizes=(1, 32, None),
                                verbose=False)
        self.assertTrue(result['passed'], msg=str(result['mismatches'][:3]))


if __name__ == '__main__':
    unittest.main()
