#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

directory = os.path.dirname(os.path.realpath(__file__))


if __name__ == "__main__":
    setup(
        name="voxbox",
        packages=find_packages(include=["voxbox", "voxbox.*"]),
        python_requires='>3.10.0',
        version="0.1.0",
        license="MIT",
        description="Per-voxel collision AABB generation for triangle meshes",
        long_description=open(os.path.join(
            directory, "README.md"), "r", encoding="utf8").read(),
        long_description_content_type="text/markdown",
        keywords=["voxel", "collision", "aabb", "mesh"],
        classifiers=[],
        include_package_data=True,
        install_requires=[
            "numpy",
            "pyassimp",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": [
                "voxbox=voxbox.__main__:main",
            ],
        },
        zip_safe=False,
    )
