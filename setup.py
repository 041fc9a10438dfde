from setuptools import setup, find_packages

setup(
    name="nss_bonds",
    version="0.1.0",
    description="Fixed-coupon bond valuation against a Nelson-Siegel-Svensson curve",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "nss-bonds=nss_bonds.cli:main",
        ],
    },
    python_requires=">=3.8",
)
