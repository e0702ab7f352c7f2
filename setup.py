"""
Setup script for the gameplay-arena package.

Installs the ``gameplay_arena`` package from src/ together with the
SQLite schema it creates databases from.
"""

from setuptools import setup, find_packages

setup(
    name="gameplay-arena",
    version="1.0.0",
    description="Gameplay Arena - turn-based Connect4 and Poker matches between users and HTTP agents",
    author="Course Staff",
    license="Proprietary",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
        "httpx>=0.27.0",
        "uuid6>=2024.1.12",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "pytest>=7.0",
            "build",
            "wheel",
        ],
    },
    package_data={
        "gameplay_arena": ["_store/schema.sql"],
    },
    entry_points={
        "console_scripts": [
            "gameplay-arena=gameplay_arena.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
