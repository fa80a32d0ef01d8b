from setuptools import setup, find_packages

setup(
    name='fwhistory',
    version='0.1.0',
    description='Samsung firmware history lookup with changelogs',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'aiohttp',
        'beautifulsoup4',
        'platformdirs',
        'PyYAML',
        'requests',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'fwhistory=fwhistory.cli:main',
        ],
    },
)
