# coding=utf-8
from setuptools import setup

setup(
    name='proto-tree',
    description='schema-less protobuf decoding, inspection, '
                'and lossless re-encoding',
    version='0.1',
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: 3.7',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'License :: OSI Approved :: MIT License',
    ],

    packages=[
        'proto_tree',
    ],

    package_dir={'': "src"},

    install_requires=[],
    extras_require={
        'test': [
            'flake8',
            'pytest-cov',
        ]
    },
)
