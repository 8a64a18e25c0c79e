"""
Setup script for the cogscan package.
"""

from setuptools import setup, find_packages
import os

# Read the README
readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
if os.path.exists(readme_path):
    with open(readme_path, 'r', encoding='utf-8') as f:
        long_description = f.read()
else:
    long_description = "Cognitive Complexity scanner for C and C++ code."

setup(
    name="cogscan",
    version="1.0.0",
    author="cogscan developers",
    author_email="cogscan@example.com",
    description="Cognitive Complexity scoring and threshold reports for C and C++ functions",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/cogscan/cogscan",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml>=6.0",
        "rich>=13.0",
        "tree-sitter>=0.22",
        "tree-sitter-cpp>=0.22",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=23.0",
            "mypy>=1.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cogscan=cogscan.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: C++",
        "Topic :: Software Development :: Quality Assurance",
    ],
    keywords="cognitive-complexity, static-analysis, metrics, c++, code-quality",
    project_urls={
        "Bug Reports": "https://github.com/cogscan/cogscan/issues",
        "Source": "https://github.com/cogscan/cogscan",
    },
)
