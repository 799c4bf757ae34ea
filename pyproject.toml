[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "glomap"
version = "0.1.0"
description = "Global structure-from-motion building blocks: poses, cameras, view graphs, inlier scoring, track filtering and clustering"
requires-python = ">=3.10"
keywords = [
    "structure-from-motion",
    "sfm",
    "computer-vision",
    "view-graph",
    "epipolar-geometry",
    "multi-view-geometry",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Processing",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["glomap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
