import re

from setuptools import find_packages, setup

with open("README.md", "r") as readme:
    long_description = readme.read()

with open("resolvecss/__init__.py", "r") as src:
    version = re.match(r'.*__version__ = "(.*?)"', src.read(), re.S).group(1)

setup(
    name="resolvecss",
    version=version,
    description="Rewrites url() statements in CSS for a new output location.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    install_requires=["PyYAML"],
    packages=find_packages(exclude=["tests"]),
    extras_require={
        "cssmin": ["rcssmin"],
        "sass": ["libsass"],
        "all": ["rcssmin", "libsass"],
        "test": ["pytest"],
    },
    entry_points={"console_scripts": ["resolvecss=resolvecss.cli:main"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
    ],
)
