from setuptools import find_packages, setup

with open("README.rst") as f:
    long_description = f.read()

setup(
    name="geofund",
    version="0.1.0",
    description="Vector and raster building blocks for small thematic maps",
    long_description=long_description,
    license="MIT",
    packages=find_packages(include=["geofund", "geofund.*"]),
    package_dir={"geofund": "geofund"},
    test_suite="geofund/tests",
    python_requires=">=3.10",
    install_requires=[
        "affine>=3",
        "filelock",
        "geopandas",
        "loguru",
        "matplotlib",
        "numpy",
        "pandas",
        "pooch",
        "pyproj",
        "rasterio>=1",
        "requests",
        "shapely>=2",
        "xarray>=0.11",
    ],
    extras_require={
        "dev": [
            "black",
            "pytest",
            "pytest-cov",
        ],
    },
    classifiers=[
        # https://pypi.python.org/pypi?%3Aaction=list_classifiers
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: GIS",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: Implementation :: CPython",
    ],
    keywords="gis raster vector geometry map",
)
