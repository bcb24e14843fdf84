[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iotkit"
version = "0.1.0"
description = "Building blocks for small connected devices: a strict URL parser, JSON number handling, serialization writers, string storage, a memory pool and a DHT20 sensor driver."
requires-python = ">=3.10"
dependencies = []
keywords = ["iot", "embedded", "json", "url", "sensor", "dht20", "i2c", "crc8"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["iotkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
