[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dsokit"
version = "0.1.0"
description = "Building blocks for direct sparse visual odometry: images, interpolation, pixel selection, projection and k-d tree search"
requires-python = ">=3.10"
keywords = ["visual-odometry", "slam", "computer-vision", "kd-tree", "interpolation", "image-processing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["dsokit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
