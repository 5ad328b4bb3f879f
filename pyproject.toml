[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netpolkit"
version = "0.1.0"
description = "Kubernetes network policy model, matching helpers, an in-memory cluster and building blocks for policy test cases"
requires-python = ">=3.10"
keywords = ["kubernetes", "network-policy", "networkpolicy", "testing", "label-selector", "cidr"]
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
    "Topic :: Software Development :: Testing",
    "Topic :: System :: Networking",
]
dependencies = [
    "pyyaml",
    "tabulate",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["netpolkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
