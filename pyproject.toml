[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "levelsolve"
version = "0.1.0"
description = "Level-scheduled sparse lower-triangular solves on CSR matrices, with distributed schedules replayed in one process"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "sparse",
    "csr",
    "triangular-solve",
    "sptrsv",
    "level-scheduling",
    "linear-algebra",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
levelsolve = "levelsolve.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["levelsolve"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
