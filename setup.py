import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="smithy_to_code",
    version="0.1.0",
    description="Generate Python data types, a FastAPI server layer and an httpx client from Smithy IDL models",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Intended Audience :: Developers",
    ],
    keywords="smithy idl code generation python dataclass fastapi httpx template",
    author="François Lagunas",
    author_email="francois.lagunas@gmail.com",
    license="MIT",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
            # Runtime of the generated code, exercised by the end-to-end tests
            "dataclasses-json>=0.6.0",
            "fastapi>=0.100.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "smithy_to_code=smithy_to_code.smithy_to_code:smithy_to_code",
        ],
    },
    include_package_data=True,
    package_data={
        "smithy_to_code": ["templates/**/*.jinja2", "validation_rules_python.json"],
    },
    zip_safe=False,
)
