#!/usr/bin/env python

import re

from setuptools import setup

with open('pdfrev/__init__.py') as f:
    version = re.search(r"__version__ = '([^']+)'", f.read()).group(1)

with open('README.rst', 'rb') as f:
    long_description = f.read().decode('utf-8')

setup(
    name='pdfrev',
    version=version,
    description='PDF object, revision, content stream and security engine',
    long_description=long_description,
    author='Patrick Maupin',
    author_email='pmaupin@gmail.com',
    platforms='Independent',
    packages=['pdfrev', 'pdfrev.objects'],
    license='MIT',
    install_requires=['pycryptodome'],
    extras_require={'test': ['pytest']},
    python_requires='>=3.5',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Libraries',
        'Topic :: Text Processing',
        'Topic :: Printing',
        'Topic :: Utilities',
    ],
    keywords='pdf incremental update revision content stream encryption',
)
