#!/usr/bin/env python
from setuptools import setup
setup(
    name='parseobjects',
    version='1.0',
    description='an object model for the Parse REST API',
    author='The parseobjects developers',

    packages=['parseobjects'],
    provides=['parseobjects'],
    install_requires=['simplejson>=2.0.0', 'httplib2>=0.4.0'],
    extras_require={
        'test': ['mock', 'pytest'],
    },
)
