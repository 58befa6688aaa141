[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kblayout"
version = "0.1.0"
description = "Ngram statistics, metric results and layout optimizers for keyboard layout evaluation"
requires-python = ">=3.10"
keywords = [
    "keyboard",
    "layout",
    "ngrams",
    "optimization",
    "simulated-annealing",
    "genetic-algorithm",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kblayout"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
