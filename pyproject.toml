[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "higo"
version = "0.1.0"
description = "Web application building blocks: SQL expression helpers, statement builders, event bus, rate limiting, error codes, background tasks and code-generation helpers"
requires-python = ">=3.10"
keywords = ["sql", "query-builder", "rate-limit", "token-bucket", "event-bus", "error-codes", "code-generation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["higo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
