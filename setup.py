from setuptools import find_packages, setup

setup(
    name="particle-fft",
    version="0.1.0",
    description="FFT-linked position/momentum grids and lazy operators for a 1-D quantum particle",
    packages=find_packages(exclude=["tests", "examples"]),
    install_requires=[
        "numpy",
        "scipy",
        "sympy",
        "qutip",
        "antlr4-python3-runtime==4.11",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.10",
)
