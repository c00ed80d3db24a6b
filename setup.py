r"""
Shim setup.py
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name = 'scdensity',
    version = '0.1.0',
    description = 'Weighted kernel density estimation of gene expression on single-cell embeddings',
    license = 'GNU License',
    install_requires = ['numpy','scipy','pandas','anndata','scanpy','joblib','tqdm'],
    extras_require = {
        'tests': ['pytest'],
    },
    packages = find_packages(include=["scdensity", "scdensity.*"]),
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires='>=3.8',
)
