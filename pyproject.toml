[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "plotexpr"
version = "0.1.0"
description = "Parse, compile and evaluate mathematical expressions and user-defined functions for plotting"
requires-python = ">=3.10"
dependencies = []
keywords = ["math", "expression", "parser", "evaluator", "functions"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["plotexpr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
