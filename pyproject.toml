[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "patchman"
version = "0.1.0"
description = "Paging, filter, tag, sort and export helpers for a system patch management API, with a mock platform server"
requires-python = ">=3.10"
dependencies = []
keywords = ["patch", "advisories", "inventory", "rbac", "paging", "filters", "csv", "mock"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
patchman-platform = "patchman.platform_server:main"

[tool.hatch.build.targets.wheel]
packages = ["patchman"]

[tool.pytest.ini_options]
addopts = "-ra"
