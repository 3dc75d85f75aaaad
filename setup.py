from setuptools import setup, find_namespace_packages

setup(
    name="library_lending",
    version="0.1.0",
    packages=find_namespace_packages(include=['lending*', 'api*', 'cli*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
        "fastapi",
        "pydantic>=2",
        "uvicorn",
        "Werkzeug",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "library-lending=cli.main:main",
        ],
    },
)
