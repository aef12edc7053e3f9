[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cloudops-metrics"
version = "0.1.0"
description = "Metric configuration, naming, monitored-resource mapping and cumulative-point normalization for cloud monitoring exporters"
requires-python = ">=3.10"
dependencies = []
keywords = ["metrics", "monitoring", "prometheus", "normalization", "telemetry"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cloudops_metrics"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
