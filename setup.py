# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Setuptools installer for captive-access."""

from os.path import dirname, join

from setuptools import find_packages, setup


def read(filename):
    """Return the whitespace-stripped content of `filename`."""
    path = join(dirname(__file__), filename)
    with open(path, "r") as fin:
        return fin.read().strip()


setup(
    name="captive-access",
    version="1.0.0",
    license="AGPLv3",
    description="Network access control for a captive portal",
    long_description=read("README.rst"),
    packages=find_packages(
        where="src",
        exclude=["*.testing", "*.tests", "captivetesting", "captivetesting.*"],
    ),
    package_dir={"": "src"},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "formencode",
        "netaddr",
        "PyYAML",
        "Twisted",
        "zope.interface",
    ],
    extras_require={
        "test": [
            "fixtures",
            "pytest",
            "testtools",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: GNU Affero General Public License v3",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Networking :: Firewalls",
    ],
)
