import math

import pytest

from levelsolve.compare import Comparison, compare_solutions, load_solution


def _write(tmp_path, text):
    path = tmp_path / "solution.txt"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_solution_reads_all_numbers(tmp_path):
    path = _write(tmp_path, "1.5\n-2.25\n3\n")
    assert load_solution(path) == [1.5, -2.25, 3.0]


def test_load_solution_stops_at_first_bad_token(tmp_path):
    path = _write(tmp_path, "1.5 2.5 abc 3.0\n")
    assert load_solution(path) == [1.5, 2.5]


def test_load_solution_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_solution(tmp_path / "absent.txt")


def test_identical_vectors_pass():
    result = compare_solutions([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])
    assert result.max_error == 0.0
    assert result.mean_error == 0.0
    assert result.passed is True


def test_large_difference_fails():
    result = compare_solutions([1.0, 2.0], [1.0, 2.5])
    assert result.passed is False
    assert result.max_error == pytest.approx(0.5)
    assert result.mean_error == pytest.approx(0.25)


def test_custom_tolerance_accepts_difference():
    result = compare_solutions([1.0, 2.0], [1.0, 2.5], tolerance=1.0)
    assert result.passed is True
    assert result.tolerance == 1.0


def test_mean_never_exceeds_max():
    result = compare_solutions([0.0, 1.0, 2.0, 3.0], [0.1, 1.0, 2.7, 3.2])
    assert result.mean_error <= result.max_error


def test_size_mismatch_raises():
    with pytest.raises(ValueError, match="different sizes"):
        compare_solutions([1.0, 2.0], [1.0])


def test_empty_vectors_have_undefined_mean():
    result = compare_solutions([], [])
    assert math.isnan(result.mean_error)
    assert result.passed is True


def test_report_pass_lines():
    report = compare_solutions([1.0], [1.0]).report()
    lines = report.splitlines()
    assert lines[0] == "Max absolute error:  0.000000000000"
    assert lines[2] == "Tolerance threshold: 0.000000000001"
    assert lines[-1] == "PASS: Solutions match within tolerance."


def test_report_fail_verdict():
    report = Comparison(max_error=1.0, mean_error=0.5, tolerance=1e-12, passed=False).report()
    assert report.splitlines()[-1] == "FAIL: Differences exceed tolerance."