[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cortexmem"
version = "1.4.0"
description = "Persistent memory store for AI coding agents, backed by SQLite"
requires-python = ">=3.11"
keywords = ["memory", "sqlite", "full-text-search", "ai-agents", "embeddings"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development",
]
dependencies = [
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
cortexmem = "cortexmem.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cortexmem"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
