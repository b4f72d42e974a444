[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oteloperator"
version = "0.1.0"
description = "OpenTelemetry collector resource model, admission checks, reconciliation task runner and a Prometheus target allocator"
requires-python = ">=3.10"
keywords = ["opentelemetry", "collector", "kubernetes", "operator", "prometheus", "target-allocator"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
otel-allocator = "oteloperator.server:main"

[tool.hatch.build.targets.wheel]
packages = ["oteloperator"]

[tool.pytest.ini_options]
addopts = "-ra"
