from setuptools import setup, find_packages
import os
import re

# Read version from __init__.py
with open(os.path.join("llm_sync", "__init__.py"), "r") as f:
    content = f.read()
    version_match = re.search(r"__version__\s*=\s*['\"]([^'\"]*)['\"]", content)
    version = version_match.group(1) if version_match else "0.0.0"

# Read long description from README
with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="llm-sync",
    version=version,
    author="Binary Ward",
    description="Operator tools for keeping local LLM models and assistant skills in sync",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/binaryward/llm-sync",
    packages=find_packages(exclude=["tests"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "requests>=2.31.0",
        "psutil>=5.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "llm-sync=llm_sync.cli:main",
            "sync-ollama-models=llm_sync.cli:sync_models_main",
            "test-ollama-tools=llm_sync.cli:probe_tools_main",
            "sync-skills=llm_sync.cli:sync_skills_main",
        ],
    },
)
