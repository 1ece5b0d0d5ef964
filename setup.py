"""
Setup script for quizsmith.

Quizsmith turns raw study content (notes, pasted text, extracted
documents, transcripts) into a validated quiz:

1. Chunk the source and split the question quota across chunks
2. Retrieve grounding context from a semantic index (optional)
3. Generate candidate questions per chunk with an LLM
4. Validate structurally and with an independent model, then select

The 'quizsmith' command is the CLI entry point; the API is served from
src.api.main:app.
"""

from setuptools import find_namespace_packages, setup

setup(
    name="quizsmith",
    version="0.1.0",
    description="Content-to-quiz generation and validation pipeline",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # API
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        # LLM providers
        "google-generativeai>=0.3.0",
        "openai>=1.0.0",
        # Retrieval
        "sentence-transformers>=2.2.0",
        "numpy>=1.24.0",
        "qdrant-client>=1.10.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            # fastapi.testclient
            "httpx>=0.25.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizsmith=src.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="quiz generation llm education rag",
)
