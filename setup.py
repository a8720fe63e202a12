from setuptools import setup, find_namespace_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="image-binarizer",
    version="1.0.0",
    author="Image Binarizer Team",
    description="Threshold 24-bit grayscale BMP images into 1-bit BMP images, one file or a whole directory at a time",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["binarizer", "binarizer.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "image-binarizer=binarizer.cli.image_processor:main",
        ],
    },
)
