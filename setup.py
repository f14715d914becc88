from setuptools import setup, find_packages

setup(
    name="resumegate",
    version="1.0.0",
    packages=find_packages(include=["resumegate", "resumegate.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.115",
        "starlette",
        "uvicorn[standard]",
        "pydantic>=2.7",
        "pydantic-settings>=2.3",
        "httpx>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=8",
            "pytest-asyncio>=0.23",
            "respx>=0.21",
        ],
    },
)
