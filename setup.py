#!/usr/bin/env python3

import setuptools

setuptools.setup(
    name='judgecore',
    version='0.1.0',
    description='Build, run and judge submitted programs under time and memory limits',
    python_requires='>=3.11',
    packages=setuptools.find_packages(include=['judgecore', 'judgecore.*']),
    # The config files are read at runtime from the installed package.
    package_data={
        'judgecore': ['config/*.yaml'],
    },
    install_requires=[
        'PyYAML',
        'colorlog',
        'pydantic>=2',
        'fastapi',
        'uvicorn',
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    entry_points={
        'console_scripts': [
            'judge=judgecore.judge:main',
            'judgecore-server=judgecore.server:main',
        ],
    },
)
