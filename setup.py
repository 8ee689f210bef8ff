from setuptools import setup, find_packages

setup(
    name="signed_louvain",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "scipy",
        "scikit-learn",
        "pandas",
        "numba",
        "tqdm"
    ],
    extras_require={
        "test": ["pytest"],
    },
    author="Connor Frankston",
    description="Hierarchical Louvain community detection for signed, directed networks",
    python_requires=">=3.8",
)
