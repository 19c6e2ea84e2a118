import io
from setuptools import setup, find_packages


def read_file(filename, **kwargs):
    encoding = kwargs.get("encoding", "utf-8")

    with io.open(filename, encoding=encoding) as f:
        return f.read()

with open("nocsat/version.py", "r") as f:
    exec(f.read())

setup(
    name="nocsat",
    version=__version__,
    packages=find_packages(exclude=["tests", "tests.*"]),

    # Metadata for PyPi
    author="The nocsat Authors",
    description="Constraint-based traffic flow routing for FPGA "
                "Networks-on-Chip",
    long_description=read_file("README.rst"),
    license="GPLv2",
    classifiers=[
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",

        "License :: OSI Approved :: GNU General Public License v2 (GPLv2)",

        "Operating System :: POSIX :: Linux",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: MacOS",

        "Programming Language :: Python :: 3",

        "Topic :: Scientific/Engineering :: Electronic Design Automation "
        "(EDA)",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="fpga noc network-on-chip routing cp-sat",

    # Requirements
    install_requires=["numpy", "sentinel", "ortools>=9.8"],
    extras_require={
        "test": ["pytest", "mock"],
    },

    # Scripts
    entry_points={
        "console_scripts": [
            "nocsat-route = nocsat.scripts.nocsat_route:main",
        ],
    }
)
