# setup.py
from setuptools import setup, find_packages

setup(
    name="absencetracker",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dateutil",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "absencetracker=absencetracker.main:run_wizard",
        ],
    },
)
