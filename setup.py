from setuptools import setup, find_packages

setup(
    name="c4online",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["run"],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "websockets>=10.0",  # asyncio websocket client for the game server
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "c4online=run:main",
        ],
    },
)
