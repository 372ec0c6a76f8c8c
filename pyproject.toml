[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spoolproxy"
version = "0.1.0"
description = "A Spoolman-compatible HTTP API that serves filament spools straight from an InvenTree inventory."
requires-python = ">=3.10"
keywords = ["spoolman", "inventree", "3d-printing", "filament", "inventory", "proxy"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: AsyncIO",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Office/Business",
]
dependencies = [
    "httpx>=0.27",
    "aiosqlite>=0.20",
    "starlette>=0.37",
    "uvicorn>=0.29",
]

[project.optional-dependencies]
test = [
    "pytest>=8.0",
    "pytest-asyncio>=0.23",
    "httpx>=0.27",
]

[project.scripts]
spoolproxy = "spoolproxy.app:main"

[tool.hatch.build.targets.wheel]
packages = ["spoolproxy"]

[tool.hatch.build.targets.sdist]
include = ["spoolproxy", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP", "SIM"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
