import setuptools
from setuptools import find_packages

with open("readme.md", "r") as fh:
    long_description = fh.read()


vars2find = ["__author__", "__version__"]
vars2readme = {}
with open("./nano_snapshot/__init__.py") as f:
    for line in f.readlines():
        for v in vars2find:
            if line.startswith(v):
                line = line.replace(" ", "").replace('"', "").replace("'", "").strip()
                vars2readme[v] = line.split("=")[1]


# Core dependencies (the HTTP API ships with the package)
core_deps = [
    "pydantic>=2.5",
    "httpx>=0.24.0",
    "tenacity",
    "fastapi>=0.100.0",
    "pydantic-settings>=2.0",
    "uvicorn",
    "redis[hiredis]>=5.0.1",
]

setuptools.setup(
    name="nano-snapshot",
    version=vars2readme["__version__"],
    author=vars2readme["__author__"],
    description="A small backup and restore orchestrator for SolrCloud collections",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["nano_snapshot", "nano_snapshot.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=core_deps,
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
)
