from setuptools import setup, find_packages

setup(
    name="gol-sim",
    version="0.1.0",
    description="Conway's Game of Life simulator with video recording",
    author="gol-sim contributors",
    packages=find_packages(exclude=["tests"]),
    py_modules=["main"],
    install_requires=[
        "torch>=1.7.0",
        "numpy>=1.19.0",
        "vispy>=0.6.6",
        "PyQt5>=5.15.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "gol-sim=main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Topic :: Scientific/Engineering :: Visualization",
        "Topic :: Multimedia :: Video",
    ],
)
