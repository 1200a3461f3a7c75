[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tgspeedtest"
version = "0.1.0"
description = "Telegram bot and HTTP front end for measuring connection speed to Telegram"
requires-python = ">=3.10"
keywords = ["telegram", "bot", "speedtest", "bandwidth", "http"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: System :: Networking :: Monitoring",
]
dependencies = [
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
tgspeedtest-bot = "tgspeedtest.bot:main"

[tool.hatch.build.targets.wheel]
packages = ["tgspeedtest"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
