from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="map-annotation",
    version=Path("./map_annotation/VERSION").read_text().strip(),
    description="Annotate GeoJSON feature maps with point markers",
    packages=find_packages(include=["map_annotation", "map_annotation.*"]),
    package_data={"map_annotation": ["VERSION", "i18n/*/LC_MESSAGES/*.mo"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "shapely>=2.0",
        "pyproj>=3.0",
        "easydict",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["map-annotation=map_annotation.cli:main"],
    },
)
