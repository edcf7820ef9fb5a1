from setuptools import setup, find_packages
from pathlib import Path
import sys

# Check Python version requirement
if sys.version_info < (3, 9):
    raise RuntimeError("FtpWire requires Python 3.9 or newer")

setup(
    name="FtpWire",
    version="1.0.0",
    author="Andrew Hernandez",
    author_email="andromedeyz@hotmail.com",
    description="An async FTP control-channel engine for Python with reply parsing, retry logic, and passive data transfers.",
    long_description=(
        open("README.md", "r", encoding="utf-8").read()
        if Path("README.md").exists()
        else "FtpWire speaks the FTP control protocol for you. It parses multi-line replies, classifies every status, retries transient failures, restarts dependent command sequences, and runs passive data transfers on top of aioftp streams."
    ),
    long_description_content_type="text/markdown",
    url="http://github.com/ApaxPhoenix/FtpWire",
    project_urls={
        "Bug Tracker": "http://github.com/ApaxPhoenix/FtpWire/issues",
        "Source Code": "http://github.com/ApaxPhoenix/FtpWire",
    },
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: File Transfer Protocol (FTP)",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Networking",
    ],
    python_requires=">=3.9",
    install_requires=[
        "aioftp>=0.21.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    keywords="ftp, async, protocol, file transfer, networking, client",
    license="MIT",
    zip_safe=False,
    include_package_data=True,
)
