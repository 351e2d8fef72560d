from setuptools import setup, find_packages

setup(
    name="urlfilter",
    version="0.1.0",
    packages=find_packages(include=["urlfilter", "urlfilter.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "pyahocorasick>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["urlfilter=urlfilter.__main__:main"],
    },
)
