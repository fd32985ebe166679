"""Setup configuration for jobtracker."""

from setuptools import setup, find_packages

setup(
    name="jobtracker",
    version="1.0.0",
    description="In-process run tracking for scheduled jobs",
    author="Your Name",
    packages=find_packages(include=["jobtracker", "jobtracker.*"]),
    install_requires=[
        "click>=8.1.7",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "structlog>=23.2.0",
        "APScheduler>=3.10,<4",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "jobtracker=jobtracker.cli:cli",
        ],
    },
    python_requires=">=3.8",
)
