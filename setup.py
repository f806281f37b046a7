from pathlib import Path

from setuptools import setup, find_packages

HERE = Path(__file__).parent


def parse_requirements(filename):
    return [line.strip() for line in (HERE / filename).read_text().splitlines()
            if line.strip() and not line.startswith("#")]


setup(
    name="rescope",
    version="0.1.0",
    description="Dependency injection with a two-phase module lifecycle and reactive scopes",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=parse_requirements("requirements.txt"),
    extras_require={"dev": parse_requirements("requirements-test.txt")}
)
