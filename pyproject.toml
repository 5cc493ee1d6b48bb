[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edownload"
version = "0.4.3"
description = "Desktop downloader for posts, favourites and bulk result pages from e926/e621-style post APIs"
requires-python = ">=3.10"
keywords = ["downloader", "e926", "e621", "posts", "favourites", "bulk", "tkinter"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Environment :: Win32 (MS Windows)",
    "Environment :: MacOS X",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
edownload = "edownload.app:main"

[tool.hatch.build.targets.wheel]
packages = ["edownload"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
