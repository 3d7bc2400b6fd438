[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "declscope"
version = "0.1.0"
description = "Scoped symbol tables, type model and declaration checking for a C-like language front end"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "symbol table", "semantic analysis", "types", "name mangling"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["declscope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
