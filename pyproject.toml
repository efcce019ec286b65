[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cloudnuke"
version = "0.1.0"
description = "Find and delete stale AWS resources: Elastic IPs, EKS clusters, load balancers, IAM users, Lambda functions, launch configurations, NAT gateways and RDS databases."
requires-python = ">=3.10"
dependencies = []
keywords = ["aws", "cleanup", "cloud", "nuke", "resources"]
classifiers = [
    "Development Status :: 4 - Beta",
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

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cloudnuke"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
