#!/usr/bin/env python
import setuptools

setuptools.setup(
    name="spl-labels",
    version="0.0.1",
    description="Structured Product Labeling importer",
    packages=setuptools.find_packages(exclude=["*.tests", "*.tests.*"]),
    install_requires=[
        "dj-database-url",
        "django",
        "lxml",
        "psycopg2-binary",
        "python-dateutil",
        "python-dotenv",
        "sentry-sdk",
    ],
    extras_require={
        "test": [
            "factory-boy",
            "pytest",
            "pytest-django",
        ],
    },
)
