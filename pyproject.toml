[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "releaseflow"
version = "0.1.0"
description = "Release resource models, status conditions and admission webhook logic for a release pipeline service"
requires-python = ">=3.10"
dependencies = []
keywords = ["release", "admission", "webhook", "conditions", "json-patch"]
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
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["releaseflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
