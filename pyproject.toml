[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "webshield"
version = "0.1.0"
description = "Cross-origin resource sharing controls and Redis-backed rate limiting for Python web services"
requires-python = ">=3.10"
dependencies = [
    "redis",
]
keywords = ["cors", "cross-origin", "preflight", "rate-limit", "middleware", "wsgi", "redis"]
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
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
    "Topic :: Security",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
webshield-cors-demo = "webshield.cors_demo:main"

[tool.hatch.build.targets.wheel]
packages = ["webshield"]

[tool.pytest.ini_options]
addopts = "-ra"
