[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "webchat"
version = "0.1.0"
description = "A small WebSocket chat client with user lists, messages and emoji reactions"
requires-python = ">=3.10"
dependencies = [
    "websockets",
]
keywords = ["chat", "websocket", "client", "reactions", "messaging"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
webchat = "webchat.app:main"

[tool.hatch.build.targets.wheel]
packages = ["webchat"]

[tool.hatch.build.targets.sdist]
include = ["webchat", "tests", "README.md", "pyproject.toml"]

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
warn_unused_ignores = true
warn_redundant_casts = true
