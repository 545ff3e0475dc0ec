from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="tupoint-e2e",
    version="1.0.0",
    description="Browser end-to-end suites for the tuPoint web app (sign-up, sign-in, sessions, theme, visual regression)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["tupoint_e2e", "tupoint_e2e.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Framework :: Pytest",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    entry_points={
        "console_scripts": [
            "tupoint-e2e=tupoint_e2e.cli:main",
        ],
    },
)
