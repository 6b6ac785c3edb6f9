# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="codeforgeai",
    version="0.3.0",
    description="Local developer assistant: project classification, prompts, commit messages and edits via LLMs",
    author="CodeforgeAI Developers",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["codeforgeai", "codeforgeai.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'codeforgeai=codeforgeai.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
