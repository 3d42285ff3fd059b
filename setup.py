# setup.py
from setuptools import setup, find_packages

setup(
    name="doc_scout",
    version="0.1.0",
    description="Breadth-first documentation crawler that classifies pages into structured knowledge",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.2",
    ],
    extras_require={
        "browser": ["playwright>=1.40"],
        "test": ["pytest>=8.0", "pytest-asyncio>=0.23"],
    },
    entry_points={
        "console_scripts": ["doc_scout=doc_scout.cli:cli"],
    },
    python_requires=">=3.11",
)
