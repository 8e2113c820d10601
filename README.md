# levelsolve

Solve sparse lower-triangular systems `L x = b` stored in CSR form by
*level scheduling*: rows are grouped into levels so that every row in a
level depends only on rows in earlier levels. Rows within a level can be
computed independently, which is what makes the solve parallel.

The package also plans how the work would be split across several
processes (row ownership, per-level gather counts and offsets, and the
order in which results arrive). Those plans are replayed in a single
process: every simulated rank keeps its own copy of the solution and the
exchanges between ranks happen in memory. The results can be checked
against a plain serial solve.

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## The CSR text format

A matrix file holds whitespace-separated values in this order:

```
n
len(row_ptr)
row_ptr...
len(col_id)
col_id...
len(val)
val...
```

Indices are 0-based. `load_csr` raises `ValueError` if the file ends
early or holds a token of the wrong kind.

## Command line

```
levelsolve matrix_csr.txt
```

Loads the matrix, splits its rows into contiguous blocks, builds one
schedule per rank, solves `L x = 1` with `parallel_solve_fast`
(repeatedly, each run starting from the previous result), prints timing
figures and writes the solution, one value per line with 16 decimals,
to `Parallel_solution.txt`.

Options:

- `--procs N` — number of ranks to simulate (default 1)
- `--iterations N` — number of repeated solves (default 1000)
- `--output PATH` — where to write the solution

The exit status is 0 on success and 1 if the matrix cannot be read,
the dependency graph has a cycle, or the solution cannot be written.
The communication times printed are always 0, since no real messages
are sent.

## Library use

### Reading and writing matrices

```python
from levelsolve.csr import load_csr, save_csr, load_csr_from_triplet_file

matrix = load_csr("matrix_csr.txt")
print(matrix.n, len(matrix.val))
print(matrix.row_entries(0))            # [(column, value), ...]

# A triplet file holds "row col value" lines; rows are 1-based, columns
# are taken as they are. Blank and unparsable lines are skipped.
converted = load_csr_from_triplet_file("L_triplet.txt")
save_csr(converted, "L_triplet.txt_csr.txt")
```

`read_triplets` and `csr_from_triplets` are the two halves of
`load_csr_from_triplet_file`; `Triplet` is the entry type they share.
Load and save times are reported through the `logging` module.

### Level scheduling

```python
from levelsolve.analysis import level_scheduling, level_scheduling_plain, CycleError

graph = level_scheduling(matrix)        # levels, dependents, dependencies
flat = level_scheduling_plain(matrix)   # the same packed into offset arrays
first_level = flat.level(0)
children_of_row_0 = flat.dependents(0)
```

A matrix whose dependencies form a cycle raises `CycleError`.

### Partitioning rows and building schedules

```python
from levelsolve.partition import row_owner_block, row_owner_mod, row_owner_block_cyclic
from levelsolve.analysis import build_schedules

nprocs = 4
owner = row_owner_block(matrix.n, nprocs)
schedules = [build_schedules(matrix, owner, rank, nprocs) for rank in range(nprocs)]
```

`row_owner_mod` deals rows out round-robin; `row_owner_block_cyclic`
deals out blocks of `block_size` rows (256 by default).

### Solving

Every solver returns a new list and leaves its arguments unchanged.

```python
from levelsolve.solvers import (
    serial_triangular_solve,
    parallel_solve_fast,
    parallel_solve_block,
    parallel_solve_p2p,
)

b = [1.0] * matrix.n
x0 = [0.0] * matrix.n

x_serial = serial_triangular_solve(matrix, b, x0)
x_fast = parallel_solve_fast(matrix, schedules, b, x0)
x_block = parallel_solve_block(matrix, b, x0, flat, owner, nprocs)
x_p2p = parallel_solve_p2p(matrix, b, x0, graph, nprocs)
```

`serial_triangular_solve`, `parallel_solve_fast` and
`parallel_solve_block` take the *last* entry stored in each row as its
diagonal, and sum over every stored entry of the row, diagonal included,
using the starting values in `x`; start from all zeros for ordinary
forward substitution. `parallel_solve_p2p` assigns rows round-robin,
finds the diagonal by its column and exchanges single values between
ranks. `allgatherv` is the in-memory gather the level solvers use.

### Synthetic matrices

The lower triangle of a red-black ordered 5-point Laplacian on a square
grid:

```python
from levelsolve.synth import red_black_laplacian, synthetic_file_name, write_synthetic

grid = red_black_laplacian(25600)       # n must be a perfect square
write_synthetic(grid, synthetic_file_name(25600))   # syn_matrix_n25600.txt
```

In these matrices the diagonal is the *first* entry of each row, so of
the solvers above only `parallel_solve_p2p` treats them as intended.

### Comparing solutions

```python
from levelsolve.compare import load_solution, compare_solutions

result = compare_solutions(
    load_solution("Serial_solution.txt"),
    load_solution("Parallel_solution.txt"),
    1e-12,
)
print(result.report())
```

Vectors of different lengths raise `ValueError`.

## What it does not do

- It runs no real processes and sends no real messages; all ranks are
  simulated in one Python process.
- There is only the one command, `levelsolve`. Converting triplet
  files, writing synthetic matrices, a serial solve and comparing
  solution files are library functions with no command of their own.