from setuptools import setup, find_packages

setup(
    name="linguacare",
    version="0.1.0",
    description="Speech therapy practice toolkit: microphone capture, speech output and AI feedback contracts",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "pyttsx3>=2.90",
        "rich>=12.5.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "linguacare=linguacare.main:main",
        ],
    },
)
