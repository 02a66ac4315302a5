# setup.py
from setuptools import setup, find_packages

setup(
    name="jlisp",
    version="0.2.0",
    description="A small Lisp with Q-expressions, closures and currying",
    packages=find_packages(include=["jlisp", "jlisp.*"]),
    python_requires=">=3.10",
    install_requires=[],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": ["jlisp=jlisp.__main__:main"],
    },
    zip_safe=False,
)
