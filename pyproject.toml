[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "clisources"
version = "0.1.0"
description = "Ordered value sources for command-line flags: environment variables, files and nested maps"
requires-python = ">=3.10"
dependencies = []
keywords = ["cli", "flags", "environment", "configuration", "value-source"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["clisources"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
