[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bionic"
version = "0.1.0"
description = "Load personal data exports from Instagram, Google Takeout and Apple Health into a local SQLite database"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "sqlite",
    "personal-data",
    "takeout",
    "instagram",
    "apple-health",
    "quantified-self",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bionic"]

[tool.pytest.ini_options]
addopts = "-ra"
