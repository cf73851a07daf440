[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wmbus-rx"
version = "0.1.0"
description = "Wireless M-Bus T-mode receiver: 3-out-of-6 coding, CRC checking, CC1101 control and Techem water meter decoding"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "wmbus",
    "wireless-mbus",
    "m-bus",
    "cc1101",
    "t-mode",
    "3-out-of-6",
    "techem",
    "water-meter",
    "smart-meter",
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
    "Topic :: Home Automation",
    "Topic :: Communications",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
wmbus-rx = "wmbus_rx.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["wmbus_rx"]

[tool.hatch.build.targets.sdist]
include = ["wmbus_rx", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
strict = true
