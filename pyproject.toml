[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "motion_tubes"
version = "0.1.0"
description = "Motion-tube templates for unicycle robots and free-space selection against 2D laser scans"
requires-python = ">=3.10"
dependencies = []
keywords = ["robotics", "motion planning", "motion tubes", "lidar", "local planner"]
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
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["motion_tubes"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
