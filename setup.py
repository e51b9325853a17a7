#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""The setup script."""

from setuptools import setup, find_packages

with open('README.rst') as readme_file:
    readme = readme_file.read()

with open('requirements.txt') as r:
    requirements = [line.strip() for line in r.readlines()
                    if line.strip() and not line.startswith('#')]

test_requirements = ['pytest', ]

setup(
    name='kubestrap',
    version='0.1.0',
    description='Bring up a kubeadm cluster on Vagrant machines',
    long_description=readme,
    long_description_content_type='text/x-rst',
    packages=find_packages(include=['kubestrap', 'kubestrap.*']),
    python_requires='>=3.8',
    install_requires=requirements,
    tests_require=test_requirements,
    extras_require={'test': test_requirements},
    entry_points={
        'console_scripts': [
            'kubestrap = kubestrap.kubestrap:main',
        ],
    },
    license='Apache Software License 2.0',
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: System Administrators',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Clustering',
    ],
)
