[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cnikit"
version = "0.1.0"
description = "Load container network configurations and run network plugins with the CNI environment"
requires-python = ">=3.10"
dependencies = []
keywords = ["cni", "container", "networking", "plugins", "netns"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cnikit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
