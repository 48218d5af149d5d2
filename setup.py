"""
Setup script for the Card Serial Reader.
"""

from setuptools import setup, find_packages

setup(
    name="card-serial-reader",
    version="1.0.0",
    description="Contactless card serial number reader with keyboard output",
    author="Card Serial Reader Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pyautogui>=0.9.53",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "tapreader=console.app:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Topic :: System :: Hardware",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
