#!/usr/bin/env python3

# python3 setup.py sdist --format=gztar

import importlib.util
import os

from setuptools import setup

HERE = os.path.dirname(os.path.abspath(__file__))


def read_requirements(filename):
    with open(os.path.join(HERE, 'contrib', 'requirements', filename)) as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]


def load_version():
    # version.py must not import the package (its dependencies may be missing)
    spec = importlib.util.spec_from_file_location('version', os.path.join(HERE, 'pstcodec', 'version.py'))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.PSTCODEC_VERSION


setup(
    name="pstcodec",
    version=load_version(),
    python_requires='>=3.8',
    install_requires=read_requirements('requirements.txt'),
    extras_require={
        'tests': read_requirements('requirements-tests.txt'),
    },
    packages=['pstcodec'],
    description="Codec for the output section of partially signed transactions",
    long_description="Parser and canonical serializer for PST output field maps",
    license="MIT Licence",
)
