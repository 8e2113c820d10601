import pytest

from levelsolve.cli import main, save_solution
from levelsolve.compare import compare_solutions, load_solution
from levelsolve.csr import CSRMatrix, save_csr
from levelsolve.solvers import serial_triangular_solve
from levelsolve.synth import red_black_laplacian


def _sample_matrix():
    # Diagonal is the last entry of each row.
    return CSRMatrix(
        n=4,
        row_ptr=[0, 1, 2, 4, 7],
        col_id=[0, 1, 0, 2, 1, 2, 3],
        val=[2.0, 4.0, -1.0, 3.0, 0.5, -1.0, 5.0],
    )


def test_save_solution_format(tmp_path):
    path = tmp_path / "x.txt"
    save_solution([0.5, -2.0], path)
    assert path.read_text(encoding="utf-8") == "0.5000000000000000\n-2.0000000000000000\n"


def test_save_solution_round_trip(tmp_path):
    path = tmp_path / "x.txt"
    values = [0.125, 3.0, -7.5]
    save_solution(values, path)
    assert load_solution(path) == values


@pytest.mark.parametrize("procs", [1, 2, 3])
def test_single_iteration_matches_serial(tmp_path, procs):
    matrix = _sample_matrix()
    matrix_path = tmp_path / "m.txt"
    out_path = tmp_path / "out.txt"
    save_csr(matrix, matrix_path)
    status = main(
        [str(matrix_path), "--procs", str(procs), "--iterations", "1", "--output", str(out_path)]
    )
    assert status == 0
    expected = serial_triangular_solve(matrix, [1.0] * matrix.n, [0.0] * matrix.n)
    result = compare_solutions(expected, load_solution(out_path), tolerance=1e-12)
    assert result.passed


def test_synthetic_matrix_solution(tmp_path):
    matrix = red_black_laplacian(16)
    # The synthetic rows store the diagonal first; reorder so it comes last.
    rows = [sorted(matrix.row_entries(r)) for r in range(matrix.n)]
    reordered = CSRMatrix(
        n=matrix.n,
        row_ptr=matrix.row_ptr,
        col_id=[c for row in rows for c, _ in row],
        val=[v for row in rows for _, v in row],
    )
    matrix_path = tmp_path / "m.txt"
    out_path = tmp_path / "out.txt"
    save_csr(reordered, matrix_path)
    assert main([str(matrix_path), "--procs", "4", "--iterations", "1", "--output", str(out_path)]) == 0
    solution = load_solution(out_path)
    assert len(solution) == 16
    expected = serial_triangular_solve(reordered, [1.0] * 16, [0.0] * 16)
    assert compare_solutions(expected, solution).passed


def test_missing_matrix_file(tmp_path, capsys):
    status = main([str(tmp_path / "absent.txt"), "--output", str(tmp_path / "o.txt")])
    assert status == 1
    assert "Cannot open file" in capsys.readouterr().err


def test_row_without_entries_is_an_error(tmp_path, capsys):
    matrix = CSRMatrix(n=2, row_ptr=[0, 1, 1], col_id=[0], val=[2.0])
    matrix_path = tmp_path / "m.txt"
    save_csr(matrix, matrix_path)
    out_path = tmp_path / "o.txt"
    status = main([str(matrix_path), "--iterations", "1", "--output", str(out_path)])
    assert status == 1
    assert "Error:" in capsys.readouterr().err
    assert not out_path.exists()


def test_invalid_process_count(tmp_path):
    matrix_path = tmp_path / "m.txt"
    save_csr(_sample_matrix(), matrix_path)
    status = main([str(matrix_path), "--procs", "0", "--output", str(tmp_path / "o.txt")])
    assert status == 1


def test_missing_argument_exits_with_usage():
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2


def test_progress_messages(tmp_path, capsys):
    matrix_path = tmp_path / "m.txt"
    save_csr(_sample_matrix(), matrix_path)
    main([str(matrix_path), "--iterations", "1", "--output", str(tmp_path / "o.txt")])
    out = capsys.readouterr().out
    assert "[rank0]  Matrix loaded: n = 4, nnz = 7" in out
    assert "Solution x Saved." in out