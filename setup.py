from pathlib import Path
from setuptools import setup, find_packages


def read_readme() -> str:
    readme_path = Path(__file__).resolve().parent / "README.md"
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""


setup(
    name="ncmdump",
    version="1.2.0",
    packages=find_packages(include=["ncmdump", "ncmdump.*"]),
    install_requires=[
        "cryptography>=41.0.0",
        "numpy>=1.24.0",
        "pillow>=10.0.0",
    ],
    extras_require={
        "color": ["colorama>=0.4.6"],
    },
    entry_points={
        "console_scripts": [
            "ncmdump=ncmdump.main:main",
        ],
    },
    python_requires=">=3.10",
    description="Recover the original audio from NCM containers",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
)
