#!/usr/bin/env python

from setuptools import setup

setup(
    name="metacache",
    version="0.1.0",
    description="Write-through file metadata cache backed by a chaining hash table",
    packages=["metacache"],
    include_package_data=True,
    zip_safe=False,
    keywords=["cache", "hashtable", "metadata"],
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Topic :: Software Development :: Libraries",
    ],
    python_requires=">=3.10",
    install_requires=[
        "peewee",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
    ],
    extras_require={
        'dev': [
            'pytest',
            'mypy',
            'flake8',
        ]
    },
    entry_points={
        'console_scripts': [
            'metacache = metacache.__main__:main'
        ]
    },
)
