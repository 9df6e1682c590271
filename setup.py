"""Setup script for score_metadata package."""

from setuptools import setup, find_packages

setup(
    name="score_metadata",
    version="1.0.0",
    description="Best-effort title/composer/key/time-signature extraction from sheet music PDFs",
    packages=find_packages(include=["score_metadata", "score_metadata.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pymupdf>=1.23.0",
        "pillow>=9.0.0",
        "openai>=1.40.0",
        "numpy>=1.21.0",
        "easyocr>=1.7.0",
        "spacy>=3.5.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov",
        ],
    },
    entry_points={
        "console_scripts": [
            "score-metadata=score_metadata.cli:main",
        ],
    },
)
