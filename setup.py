from setuptools import setup

setup(
    name="poseTwin",
    version="0.1.0",
    description="Live 3D skeleton twin driven by pose-estimation landmarks.",
    packages=["poseTwin"],
    include_package_data=True,
    install_requires=[
        "numpy",
        "scipy",
        "PyQt5",
        "PyOpenGL",
    ],
    extras_require={
        "detector": ["mediapipe", "opencv-python"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "pose-twin=poseTwin.twinClient:main",
        ],
    },
    python_requires=">=3.8",
)
