[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "znippy"
version = "0.1.0"
description = "Archive format with per-file zstd compression, a chunk index and checksum verification"
requires-python = ">=3.10"
keywords = ["archive", "compression", "zstd", "blake2", "checksum"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Compression",
]
dependencies = [
    "zstandard",
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
znippy = "znippy.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["znippy"]

[tool.hatch.build.targets.sdist]
include = ["znippy", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
