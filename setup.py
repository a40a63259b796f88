#!/usr/bin/env python
# -*- coding: utf-8 -*-
from setuptools import setup

# There are problems running setup.py on Windows if the encoding is not set
with open('README.md', encoding='utf8') as readme_file:
    readme = readme_file.read()
with open('HISTORY.rst', encoding='utf8') as history_file:
    history = history_file.read()


setup(
    name='ga-measurement-protocol',
    version='1.0.0',
    description="Client for the Google Analytics Measurement Protocol.",
    long_description=readme + '\n\n' + history,
    long_description_content_type="text/markdown",
    author="ga-measurement-protocol contributors",
    url='https://github.com/ga-measurement-protocol/ga-measurement-protocol-python',
    packages=[
        'measurement_protocol',
        'measurement_protocol.config',
        'measurement_protocol.network',
        'measurement_protocol.parameters',
    ],
    package_dir={'measurement_protocol': 'measurement_protocol'},
    package_data={'measurement_protocol': ['VERSION']},
    include_package_data=True,
    install_requires=[
        'httpx>=0.24',
        'pydantic>=2.0',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    python_requires=">=3.8",
    license="MIT license",
    zip_safe=False,
    keywords='google-analytics measurement-protocol analytics',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)
