[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "unipager"
version = "2.0.0a0"
description = "Building blocks for POCSAG paging transmitters on amateur radio paging networks"
requires-python = ">=3.10"
keywords = ["pocsag", "pager", "ham radio", "amateur radio", "dapnet", "transmitter"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
]
dependencies = [
    "pyserial",
    "requests",
    "pika",
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["unipager"]

[tool.pytest.ini_options]
addopts = "-ra"
