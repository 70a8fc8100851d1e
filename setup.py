# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Setup configuration for airbrake-proxy package."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="airbrake-proxy",
    version="0.1.0",
    author="airbrake-proxy contributors",
    description="Airbrake ingestion proxy that relays notices to Airbrake and Sentry",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(
        include=[
            "airbrake_proxy",
            "airbrake_proxy.*",
            "proxy_logging",
            "proxy_metrics",
            "proxy_store",
            "proxy_error_reporting",
        ],
    ),
    package_data={
        "airbrake_proxy": ["schemas/*.json"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "httpx>=0.26.0",
        "redis>=5.0.1",  # redis.asyncio with aclose()
        "statsd>=4.0.1",
        "sentry-sdk>=2.0.0",  # proxy's own error reporting
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "airbrake-proxy=airbrake_proxy.main:main",
        ],
    },
)
