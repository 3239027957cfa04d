import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="validate_deser",
    version="0.4.0",
    description="Decoders that validate: parse into a staging shape, convert, then run the type's own validity check",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Software Development :: Libraries",
        "Intended Audience :: Developers",
    ],
    keywords="deserialization validation pydantic dataclass namedtuple tagged union code generation",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
        "pydantic>=2.6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "validate_deser=validate_deser.cli:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "validate_deser": ["templates/**/*.jinja2"],
    },
    zip_safe=False,
)
