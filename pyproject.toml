[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pbsat"
version = "0.1.0"
description = "Pseudo-Boolean constraint arithmetic and a unit-propagation testing harness for SAT solvers"
requires-python = ">=3.10"
dependencies = []
keywords = ["sat", "pseudo-boolean", "constraints", "resolution", "dpll", "unit propagation"]
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

[tool.hatch.build.targets.wheel]
packages = ["pbsat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
