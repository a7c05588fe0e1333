from setuptools import setup, find_packages

setup(
    name="gametorch",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pillow",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "gametorch=gametorch.cli:main",
        ],
    },
)
