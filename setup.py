# setup.py
from setuptools import setup, find_packages

setup(
    name="allergen_scout",
    version="0.1.0",
    description="Поиск PDF с информацией об аллергенах на сайтах сетей ресторанов",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "lxml>=5.0",
        "playwright>=1.40",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "allergen-scout=allergen_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
