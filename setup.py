# setup.py
from setuptools import setup, find_packages

# Version is defined here to avoid import issues during build
__version__ = "5.0.0"

setup(
    name='ccjk-config',
    version=__version__,
    description='CCJK Config - local configuration platform with atomic storage, validation, migration and hot-reload.',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    author='CCJK Contributors',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    install_requires=[
        'click>=8.1.0',
        'rich>=13.0.0',
        'PyYAML>=6.0',
        'pydantic>=2.0',
        'pydantic-settings>=2.0',
        'loguru>=0.7.0',
        'watchdog>=3.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'ccjk-config = ccjk_config.cli:cli',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Topic :: Utilities",
    ],
    python_requires='>=3.11',
    keywords='ccjk, claude, configuration, migration, hot-reload',
)
