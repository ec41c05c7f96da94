from setuptools import setup, find_packages

setup(
    name='api-console-sources',
    version='0.1.0',
    description='Downloads or copies API Console sources into a build directory',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'aiohttp',
        'aiofiles',
        'packaging',
        'platformdirs',
        'PyYAML',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest<9.1',
            'pytest-asyncio',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'api-console-sources=api_console_sources.cli:main',
        ],
    },
)
