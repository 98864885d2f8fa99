[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ssoconfig"
version = "0.1.0"
description = "Generate AWS CLI profiles for every account reachable through AWS IAM Identity Center (SSO)"
requires-python = ">=3.11"
dependencies = [
    "tomli-w",
]
keywords = ["aws", "sso", "identity-center", "profiles", "aws-config", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
aws-sso-config = "ssoconfig.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ssoconfig"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
