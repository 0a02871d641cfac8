[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lsmdb"
version = "0.1.0"
description = "Relational core of an LSM-tree database: table schemas, row encoding and query execution operators"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "lsm-tree", "sql", "query-execution", "schema", "relational"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lsmdb"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"
