[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "releasekit"
version = "0.75.0"
description = "Release housekeeping tools: changelog generation, documentation anchor checks and version placeholder replacement."
requires-python = ">=3.11"
keywords = ["changelog", "release", "documentation", "mdbook", "anchors", "versions", "cargo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Documentation",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "requests>=2.28",
    "semver>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
releasekit-check-docs = "releasekit.checkdocs:main"
releasekit-versions = "releasekit.versions:main"
releasekit-fuel-core-version = "releasekit.fuelcore:main"

[tool.hatch.build.targets.wheel]
packages = ["releasekit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
