[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gizmos"
version = "0.1.0"
description = "An interactive 3D rotation gizmo for OpenGL scenes, with ray picking and transform helpers"
requires-python = ">=3.10"
keywords = ["opengl", "gizmo", "3d", "rotation", "manipulator", "graphics", "pyglet"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]
dependencies = [
    "numpy",
    "pyglet",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gizmos = "gizmos.app:main"

[tool.hatch.build.targets.wheel]
packages = ["gizmos"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
