from setuptools import setup, find_packages


setup(
    name="textclip",
    version="0.1",
    packages=find_packages(include=["textclip", "textclip.*"]),
    description="Reader and writer for .textClipping containers (plain text, RTF, RTFD, HTML and web archive representations).",
    author="vercingetorx",
    install_requires=[
        "striprtf>=0.0.26",
    ],
    entry_points={
        "console_scripts": [
            "textclip=textclip.cli:main",
        ]
    },
)
