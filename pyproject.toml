[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hyperwire"
version = "0.1.0"
description = "HTTP building blocks: status codes, versions, request targets, network streams and a listener pool"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "status", "uri", "socket", "tls", "listener"]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hyperwire"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
