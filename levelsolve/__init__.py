"""Level-scheduled sparse lower-triangular solves on CSR matrices, with simulated distributed schedules."""

__version__ = "0.1.0"