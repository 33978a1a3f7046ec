# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="pyqcrawler",
    version="1.0.0",
    description="Crawler and subject classifier for question papers on HTTP directory-listing servers",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["pyqcrawler*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests",
        "urllib3",
        "beautifulsoup4",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'pyqcrawler=pyqcrawler.main:main',
            'pyqcrawler-classify=pyqcrawler.interface.cli.classify_app:main',
            'pyqcrawler-search=pyqcrawler.interface.cli.search_app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
