from setuptools import setup, find_packages


setup(
    name="blockfile",
    version="0.1",
    packages=find_packages(include=["blockfile", "blockfile.*"]),
    description="A versioned container of fixed-size, randomly addressable blocks.",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "blockfile=blockfile.cli:main",
        ]
    },
)
