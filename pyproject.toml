[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "steelproto"
version = "0.1.0"
description = "Minecraft Java Edition network protocol primitives: VarInts, packet framing, zlib compression and AES/CFB8 stream encryption"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "minecraft",
    "protocol",
    "varint",
    "packets",
    "networking",
    "asyncio",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["steelproto"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
