from setuptools import setup, find_packages

setup(
    name             = 'sentiment-watchdog',
    version          = '1.0.0',
    description      = 'Sentiment Watchdog — customer-support sentiment dashboard pipeline',
    author           = 'Sentiment Watchdog contributors',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest', 'httpx'],
    },
    entry_points     = {
        'console_scripts': [
            'sentiwatch = sentiwatch.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
