# setup.py
from setuptools import setup, find_packages

setup(
    name="site_lingo",
    version="0.1.0",
    description="Crawler and translating proxy for websites (SiteLingo)",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-lingo=site_lingo.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
