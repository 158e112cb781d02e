[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rhiotree"
version = "0.1.0"
description = "A named tree of typed values and text streams, string-driven commands, a double-buffered publisher and small shell helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["parameters", "tree", "streaming", "publisher", "gnuplot", "csv"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rhiotree"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
