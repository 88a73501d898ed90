from os import path

from setuptools import setup

this_dir = path.abspath(path.dirname(__file__))
with open(path.join(this_dir, "README.md")) as f:
    long_description = f.read()

setup(
    name="InventoryMSA",
    description="InventoryMSA - inventory service of the order allocation saga",
    long_description=long_description,
    long_description_content_type="text/markdown",
    version="0.1.0",
    license="MIT",
    packages=[
        "inventorymsa",
        "inventorymsa.core",
        "inventorymsa.domain",
        "inventorymsa.services",
        "inventorymsa.test",
    ],
    package_data={
        "inventorymsa": ["py.typed"],
    },
    keywords=["inventory", "microservice", "saga", "sqlalchemy", "fastapi"],
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "pydantic>=2",
        "colorama",
        "tenacity",
        "redis>=4.0",
        "httpx",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
    ],
    entry_points={
        "console_scripts": [
            "inventorymsa = inventorymsa.command:console_main",
        ]
    },
)
