[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "merraki"
version = "0.1.0"
description = "Service and repository layer for a template shop: blog, categories, templates, contacts, newsletter, calculators and payment signatures."
requires-python = ">=3.10"
dependencies = [
    "python-slugify",
]
keywords = ["cms", "blog", "templates", "newsletter", "calculator", "breakeven", "valuation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: Content Management System",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["merraki"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
