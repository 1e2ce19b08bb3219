# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="taxabars",
    version="0.3.0",
    description="Project taxonomic abundance tables to an adjustable display depth",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["taxabars", "taxabars.*"]),
    package_data={"taxabars.interface.locales": ["*.json"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "polars>=0.20",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'taxabars=taxabars.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
