from setuptools import find_packages, setup

setup(
    name="progless",
    version="0.1.0",
    description="Thread-safe CLI progress bars and styled status messages",
    packages=find_packages(include=["progless", "progless.*"]),
    python_requires=">=3.10",
    install_requires=[
        "rich",
        "tracerite",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["progless=progless.cli:main"],
    },
)
