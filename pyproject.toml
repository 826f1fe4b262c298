[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "esimcli"
version = "0.1.0"
description = "Command-line front end for eUICC profile management, with pluggable APDU and HTTP drivers"
requires-python = ">=3.10"
dependencies = []
keywords = ["esim", "euicc", "lpa", "apdu", "sm-dp+", "sim", "at-commands"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Telephony",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
esimcli = "esimcli.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["esimcli"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
