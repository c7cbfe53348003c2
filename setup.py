from setuptools import setup, find_packages

setup(
    name="comicrepacker",
    version="1.0.0",
    description="Find RAR5/solid comic archives (CBR/CBZ) and repack them as plain CBZ",
    author="Jacob",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pillow",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "comicrepacker=comicrepacker.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Archiving",
    ],
    python_requires=">=3.9",
)
