from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="pingproc",
    version="1.0.0",  # Keep in sync with pingproc/__version__.py
    author="NetScope Team",
    author_email="team@netscope.dev",
    description="Blocking, background and batched execution of the system ping utility",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/netscope-tool/pingproc",
    packages=find_packages(include=["pingproc", "pingproc.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Networking :: Monitoring",
    ],
    python_requires=">=3.11",
    install_requires=[
        "typer>=0.9.0",
        "rich>=13.0.0",
        "loguru>=0.7.0",
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "pytest-asyncio>=0.21.0",
            "black>=23.0",
            "ruff>=0.1.0",
            "mypy>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pingproc=pingproc.__main__:main",
        ],
    },
)
