#!/usr/bin/env python3
"""
Setup script for the NACOS Complaint System

Install with:
    pip install -e .

Or with test tooling:
    pip install -e ".[test]"
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

# REST API dependencies
api_requirements = [
    "fastapi>=0.109.0",
    "uvicorn[standard]>=0.27.0",
    "sqlalchemy[asyncio]>=2.0.25",
    "aiosqlite>=0.19.0",
    "pydantic>=2.5.0",
    "pydantic-settings>=2.1.0",
    "python-jose[cryptography]>=3.3.0",
    "bcrypt>=4.1.0",
    "slowapi>=0.1.9",
    "aiofiles>=23.2.1",
]

# Dashboard client dependencies
dashboard_requirements = [
    "httpx>=0.26.0",
    "rich>=13.7.0",
    "prompt-toolkit>=3.0.43",
    "python-dotenv>=1.0.0",
    "beautifulsoup4>=4.12.0",
]

test_requirements = [
    "pytest>=7.4.0",
    "pytest-asyncio>=0.23.0",
    "faker>=22.0.0",
]

setup(
    name="nacos-complaints",
    version="1.0.0",
    description="NACOS Complaint System - complaint API and admin dashboard",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="NACOS Developers",
    license="MIT",
    packages=(
        find_packages(include=["dashboard", "dashboard.*"])
        + find_packages(where="backend", include=["complaint_api", "complaint_api.*"])
    ),
    package_dir={"complaint_api": "backend/complaint_api"},
    package_data={"complaint_api": ["static/sections/*.html"]},
    python_requires=">=3.9",
    install_requires=api_requirements + dashboard_requirements,
    extras_require={
        "api": api_requirements,
        "dashboard": dashboard_requirements,
        "test": test_requirements,
        "dev": test_requirements + [
            "black>=24.1.0",
            "isort>=5.13.0",
            "mypy>=1.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "nacos-dashboard=dashboard.main:main",
            "nacos-api=complaint_api.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Environment :: Web Environment",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="complaints students fastapi dashboard",
)
