# setup.py
from setuptools import setup, find_packages

setup(
    name="title_scout",
    version="0.1.0",
    description="Асинхронный краулер TitleScout: рендер страниц в Chromium и поиск по заголовку",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"title_scout": ["templates/*.j2"]},
    install_requires=[
        "playwright>=1.40",
        "aiohttp>=3.9",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["title-scout=title_scout.cli:cli"],
    },
    python_requires=">=3.11",
)
