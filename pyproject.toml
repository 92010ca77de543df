[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hcc"
version = "0.1.0"
description = "A small C compiler core that lowers a C-like syntax tree through an optimizing IR to qproc and HyperCPU assembly"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "c", "assembly", "ir", "codegen", "qproc", "hypercpu"]
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
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hcc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
