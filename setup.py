from setuptools import setup, find_packages

setup(
    name="battle_backgrounds",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.20.0",
        "matplotlib>=3.4.0",
        "tqdm>=4.62.0",
        "pandas>=1.3.0",
        "pyyaml>=5.4.0"
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "battle-backgrounds=battle_backgrounds.main:main",
        ],
    },
    author="DoubleGate",
    author_email="parobek@gmail.com",
    description="Battle background extraction and distortion rendering for SNES cartridge images",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Topic :: Multimedia :: Graphics",
    ],
    python_requires=">=3.9",
)
