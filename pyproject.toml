[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pgrchart"
version = "0.1.0"
description = "Convert Phigros-style rhythm game charts and package engine resources"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = [
    "phigros",
    "rhythm-game",
    "chart",
    "pec",
    "rpe",
    "texture-packing",
    "maxrects",
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
    "Topic :: Games/Entertainment",
    "Topic :: File Formats :: JSON",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pgrchart"]

[tool.pytest.ini_options]
addopts = "-ra"
