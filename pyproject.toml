[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gaivota"
version = "0.1.0"
description = "Crypto portfolio tracking: users, portfolios, wallets, investments, positions, holdings and orders in an SQL database, with an HTTP API and a command-line tool."
requires-python = ">=3.10"
keywords = ["portfolio", "investment", "crypto", "wallet", "postgresql", "sqlalchemy", "wsgi", "cli"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "sqlalchemy>=2.0",
    "werkzeug>=2.2",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
gaivota = "gaivota.server:main"
gaivota-cli = "gaivota.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gaivota"]

[tool.hatch.build.targets.sdist]
include = ["gaivota", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
ignore_missing_imports = true
