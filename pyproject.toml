[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cmpler"
version = "0.1.0"
description = "A compiler for a small C subset that emits LLVM IR, object files and executables"
requires-python = ">=3.11"
dependencies = []
keywords = ["compiler", "c", "small-c", "llvm", "lexer", "parser", "codegen"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cmpler = "cmpler.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cmpler"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
