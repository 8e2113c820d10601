"""Ways of assigning matrix rows to processes."""

from __future__ import annotations


def _check(n: int, nprocs: int) -> None:
    if n < 0:
        raise ValueError(f"row count must not be negative, got {n}")
    if nprocs <= 0:
        raise ValueError(f"process count must be positive, got {nprocs}")


def row_owner_mod(n: int, nprocs: int) -> list[int]:
    """Round-robin: row ``i`` goes to process ``i % nprocs``."""
    _check(n, nprocs)
    return [row % nprocs for row in range(n)]


def row_owner_block(n: int, nprocs: int) -> list[int]:
    """Contiguous blocks whose sizes differ by at most one, larger blocks first."""
    _check(n, nprocs)
    base, rem = divmod(n, nprocs)
    owner: list[int] = []
    for rank in range(nprocs):
        owner.extend([rank] * (base + (1 if rank < rem else 0)))
    return owner


def row_owner_block_cyclic(n: int, nprocs: int, block_size: int = 256) -> list[int]:
    """Blocks of ``block_size`` rows dealt out to processes in turn."""
    _check(n, nprocs)
    if block_size <= 0:
        raise ValueError(f"block size must be positive, got {block_size}")
    return [(row // block_size) % nprocs for row in range(n)]