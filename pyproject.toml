[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reifykit"
version = "0.1.1"
description = "Context-supplied ordering, hashing and display, bounded runtime value dispatch, and async step tracing with Graphviz output"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "reflection",
    "reify",
    "dispatch",
    "async",
    "tracing",
    "graphviz",
    "metaprogramming",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
reifykit-demo = "reifykit.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["reifykit"]

[tool.hatch.build.targets.sdist]
include = [
    "reifykit",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
