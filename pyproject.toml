[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "distillery"
version = "0.1.0"
description = "Pick the right release asset for your platform, pair it with its checksum, signature and key, and keep an inventory of installed binaries."
requires-python = ">=3.10"
dependencies = []
keywords = ["release", "assets", "binaries", "inventory", "checksum", "signature", "platform"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["distillery"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
