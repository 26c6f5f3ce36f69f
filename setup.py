from setuptools import setup, find_namespace_packages

setup(
    name="media_catalog",
    version="0.1.0",
    packages=find_namespace_packages(include=['media_catalog*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
        "pydantic>=2",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "media-catalog=media_catalog.cli.main:main",
        ],
    },
)
