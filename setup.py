"""
matter2mqtt-pair - Matter device pairing for matter2mqtt
Scan, commission, and register Matter devices from a phone browser
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="matter2mqtt-pair",
    version="1.0.0",
    description="Web pairing tool that commissions Matter devices and registers them for matter2mqtt",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["matter_pair", "matter_pair.*"]),
    package_data={
        "matter_pair": ["web/*"],
    },
    include_package_data=True,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Home Automation",
        "Topic :: System :: Networking",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.109.0",
        "uvicorn>=0.25.0",
        "click>=8.0.0",
        "rich>=13.0.0",
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
        "qrcode>=7.4",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.26.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "matter2mqtt-pair=matter_pair.cli:main",
        ],
    },
)
