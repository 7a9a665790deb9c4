from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_path = Path("README.md")
long_description = readme_path.read_text(encoding="utf-8")

# Read requirements file
requirements_path = Path("requirements.txt")
requirements = [
    line.strip()
    for line in requirements_path.read_text(encoding="utf-8").splitlines()
    if line.strip() and not line.startswith("#")
]

setup(
    name="netsnmp",
    version="1.0.0",
    description="SNMP network inventory scanner with CDP/LLDP neighbor discovery",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Topic :: System :: Networking",
        "Topic :: System :: Networking :: Monitoring",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': ['netsnmp=netsnmp.cli:main']
    },
)
