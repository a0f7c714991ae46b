[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shmchat"
version = "0.1.0"
description = "A small multi-client terminal chat over a lock-protected message board file"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "ipc", "readers-writer", "flock", "terminal"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
shmchat = "shmchat.launcher:main"
shmchat-client = "shmchat.client:main"

[tool.hatch.build.targets.wheel]
packages = ["shmchat"]

[tool.pytest.ini_options]
addopts = "-ra"
