"""Tests for the command-line wrapper: exit codes and report text."""
import io
import sys, os
import unittest
from contextlib import redirect_stdout, redirect_stderr
from unittest import mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from eta_scanner import cli
from eta_scanner.core import SearchResult
from eta_scanner.errors import DeviceError


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    code = None
    with redirect_stdout(out), redirect_stderr(err):
        try:
            code = cli.main(argv)
        except SystemExit as e:
            code = e.code
    return code, out.getvalue(), err.getvalue()


class TestUsageErrors(unittest.TestCase):
    def test_n_max_zero(self):
        with mock.patch.object(cli, 'search') as search:
            code, out, err = _run(['3', '0'])
        self.assertEqual(code, 1)
        self.assertIn('n_max', err)
        search.assert_not_called()

    def test_too_few_args(self):
        code, _, err = _run(['3'])
        self.assertEqual(code, 1)
        self.assertIn('usage', err)

    def test_too_many_args(self):
        code, _, _ = _run(['3', '10', '11'])
        self.assertEqual(code, 1)

    def test_not_an_integer(self):
        code, _, _ = _run(['3', 'ten'])
        self.assertEqual(code, 1)

    def test_out_of_uint64_range(self):
        code, _, _ = _run([str(2 ** 64), '10'])
        self.assertEqual(code, 1)


class TestReport(unittest.TestCase):
    def test_found(self):
        code, out, _ = _run(['3', '10', '--backend', 'cpu'])
        self.assertEqual(code, 0)
        self.assertIn('T mod 4  = 3', out)
        self.assertIn('FOUND: eta = 1', out)
        self.assertIn('|p - q| = 4*eta - 2 = 2', out)
        self.assertNotIn('WARNING', out)
        self.assertIn('Device:', out)
        self.assertIn('Elapsed:', out)

    def test_not_found_with_warning(self):
        code, out, _ = _run(['4', '1000', '--backend', 'cpu'])
        self.assertEqual(code, 0)
        self.assertIn('WARNING: T mod 4 != 3', out)
        self.assertIn('NOT FOUND', out)

    def test_ceiling_note(self):
        with mock.patch.object(cli, 'search') as search:
            search.return_value.unwrap.side_effect = DeviceError("x", "y")
            code, out, _ = _run(['3', str(2 ** 64 - 1)])
        self.assertEqual(code, 2)
        self.assertIn('safety ceiling', out)

    def test_device_failure_exit_2(self):
        err = DeviceError("kernel launch", "CUDA_ERROR_LAUNCH_FAILED", "solvers.py:83")
        with mock.patch('eta_scanner.cpu.solvers.cpu_search', side_effect=err):
            code, _, stderr = _run(['3', '10', '--backend', 'cpu'])
        self.assertEqual(code, 2)
        self.assertIn('kernel launch failed', stderr)
        self.assertIn('solvers.py:83', stderr)

    def _report(self, **overrides):
        fields = dict(T=3, n_max=10, eta=1, backend='cpu', device='cpu',
                      n_chunks=1, n_dispatched=1, chunk_size=10)
        fields.update(overrides)
        with mock.patch.object(cli, 'search', return_value=SearchResult(**fields)):
            return _run(['3', '10'])

    def test_throughput_reported(self):
        code, out, _ = self._report(elapsed=2.0, n_evaluated=1000)
        self.assertEqual(code, 0)
        self.assertIn('Throughput: 500 candidates/s', out)

    def test_throughput_omitted_for_short_run(self):
        code, out, _ = self._report(elapsed=0.0005, n_evaluated=1000)
        self.assertEqual(code, 0)
        self.assertNotIn('Throughput:', out)
        self.assertIn('FOUND: eta = 1', out)

    def test_version(self):
        code, out, _ = _run(['--version'])
        self.assertEqual(code, 0)
        self.assertIn('Siarhei Tabalevich', out)


if __name__ == '__main__':
    unittest.main()
