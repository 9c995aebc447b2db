"""
Setup configuration for kernpurge.

Installs kernpurge as a command-line tool.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read version from __init__.py
init_file = Path(__file__).parent / "kernpurge" / "__init__.py"
version = {}
with open(init_file) as f:
    for line in f:
        if line.startswith("__version__"):
            exec(line, version)
            break

# Read long description from README
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    with open(readme_file, encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="kernpurge",
    version=version.get("__version__", "0.1.0"),
    author="KernPurge Contributors",
    description="List or purge installed kernel packages other than the booted one",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/kernpurge",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.9",
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "kernpurge=kernpurge.cli:main",
        ],
    },
    keywords="kernel linux debian apt dpkg purge administration",
    project_urls={
        "Bug Reports": "https://github.com/yourusername/kernpurge/issues",
        "Source": "https://github.com/yourusername/kernpurge",
    },
)
