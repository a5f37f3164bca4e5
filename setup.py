from setuptools import setup, find_packages

setup(
    name="trxconvert",
    version="0.1.0",
    packages=find_packages(include=["trxconvert", "trxconvert.*"]),
    include_package_data=True,
    install_requires=[
        "click>=8.0.0",
        "rich>=12.0.0",
        "python-dotenv>=0.19.0",
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'trxconvert=trxconvert.__main__:main',
        ],
    },
    description="Convert Visual Studio TRX test results into JUnit XML reports",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
