import pytest

from levelsolve.csr import (
    CSRMatrix,
    Triplet,
    csr_from_triplets,
    load_csr,
    load_csr_from_triplet_file,
    read_triplets,
    save_csr,
)


@pytest.fixture
def small_matrix():
    return CSRMatrix(n=2, row_ptr=[0, 1, 3], col_id=[0, 0, 1], val=[4.0, -1.0, 4.0])


def test_save_format(tmp_path, small_matrix):
    path = tmp_path / "m.txt"
    save_csr(small_matrix, path)
    assert path.read_text() == "2\n3\n0 1 3 \n3\n0 0 1 \n3\n4 -1 4 \n"


def test_round_trip(tmp_path):
    matrix = CSRMatrix(
        n=3,
        row_ptr=[0, 1, 3, 5],
        col_id=[0, 0, 1, 1, 2],
        val=[0.5, -1.25, 2.0, 3.75, 1e-3],
    )
    path = tmp_path / "m.txt"
    save_csr(matrix, path)
    assert load_csr(path) == matrix


def test_load_reads_any_whitespace(tmp_path, small_matrix):
    path = tmp_path / "m.txt"
    path.write_text("2 3\n0\n1\n3 3 0 0 1\n3 4.0 -1 4\n")
    assert load_csr(path) == small_matrix


def test_load_truncated_raises(tmp_path):
    path = tmp_path / "m.txt"
    path.write_text("2\n3\n0 1\n")
    with pytest.raises(ValueError):
        load_csr(path)


def test_load_bad_token_raises(tmp_path):
    path = tmp_path / "m.txt"
    path.write_text("2\n3\n0 x 3\n")
    with pytest.raises(ValueError):
        load_csr(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_csr(tmp_path / "absent.txt")


def test_row_entries(small_matrix):
    assert small_matrix.row_entries(1) == [(0, -1.0), (1, 4.0)]
    assert small_matrix.row_entries(0) == [(0, 4.0)]


def test_row_entries_out_of_range(small_matrix):
    with pytest.raises(IndexError):
        small_matrix.row_entries(2)


def test_read_triplets_skips_blank_and_invalid(tmp_path):
    path = tmp_path / "t.txt"
    path.write_text("1 0 4.0\n\n2 0 -1\nbad line\n2 1 4\n")
    assert read_triplets(path) == [
        Triplet(0, 0, 4.0),
        Triplet(1, 0, -1.0),
        Triplet(1, 1, 4.0),
    ]


def test_csr_from_triplets_sorts_and_counts():
    triplets = [Triplet(2, 2, 3.0), Triplet(0, 0, 1.0), Triplet(2, 0, 5.0), Triplet(1, 1, 2.0)]
    matrix = csr_from_triplets(triplets)
    assert matrix.n == 3
    assert matrix.row_ptr[0] == 0
    assert matrix.row_ptr[-1] == len(triplets)
    assert all(a <= b for a, b in zip(matrix.row_ptr, matrix.row_ptr[1:]))
    rebuilt = {
        Triplet(row, col, v) for row in range(matrix.n) for col, v in matrix.row_entries(row)
    }
    assert rebuilt == set(triplets)
    for row in range(matrix.n):
        cols = [c for c, _ in matrix.row_entries(row)]
        assert cols == sorted(cols)


def test_csr_from_no_triplets():
    matrix = csr_from_triplets([])
    assert (matrix.n, matrix.row_ptr, matrix.col_id, matrix.val) == (0, [0], [], [])


def test_csr_from_triplets_negative_row():
    with pytest.raises(ValueError):
        csr_from_triplets([Triplet(-1, 0, 1.0)])


def test_load_from_triplet_file_matches_save_round_trip(tmp_path):
    source = tmp_path / "t.txt"
    source.write_text("2 1 -1\n1 0 4\n2 0 4\n")
    matrix = load_csr_from_triplet_file(source)
    assert matrix.row_entries(1) == [(0, 4.0), (1, -1.0)]
    target = tmp_path / "t.txt_csr.txt"
    save_csr(matrix, target)
    assert load_csr(target) == matrix