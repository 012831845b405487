[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "etnblocks"
version = "0.1.0"
description = "Building blocks for an Electroneum blockchain explorer: amount and time formatting, transaction summaries, daemon RPC, emission and mempool monitoring"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "electroneum",
    "blockchain",
    "explorer",
    "cryptocurrency",
    "mempool",
    "rpc",
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
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["etnblocks"]

[tool.hatch.build.targets.sdist]
include = ["etnblocks", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
