import os

from setuptools import find_packages, setup


# Extract version number from package/__init__.py, taken from pip setup.py
def read(rel_path: str) -> str:
    here = os.path.abspath(os.path.dirname(__file__))
    # intentionally *not* adding an encoding option to open, See:
    #   https://github.com/pypa/virtualenv/issues/201#issuecomment-3145690
    with open(os.path.join(here, rel_path)) as fp:
        return fp.read()


def get_version(rel_path: str) -> str:
    for line in read(rel_path).splitlines():
        if line.startswith("__version__"):
            # __version__ = "0.1"
            delim = '"' if '"' in line else "'"
            return line.split(delim)[1]
    raise RuntimeError("Unable to find version string.")


version = get_version("affinity_coloring/__init__.py")

# get long description from readme
long_description = read("README.md")

# requirements for testing
tests_require = ["pytest", "pytest-cov"]


# setup arguments
setup(
    name="affinity-coloring",
    version=version,
    packages=find_packages(include=["affinity_coloring", "affinity_coloring.*"]),
    install_requires=[
        "deap>=1.3.1",
        "networkx>=2.5",
        "numpy>=1.21",
        "ortools>=9.8",
    ],
    python_requires=">=3.9",
    tests_require=tests_require,
    extras_require={"test": tests_require},
    license="MIT",
    description="Graph coloring with interference and affinity edges, exact (MILP) and multi-objective (NSGA-II)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "Development Status :: 4 - Beta",
        "Topic :: Software Development",
        "Topic :: Scientific/Engineering",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: POSIX",
        "Operating System :: Unix",
        "Operating System :: MacOS",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
    ],
)
