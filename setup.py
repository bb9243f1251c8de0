import setuptools

setuptools.setup(
    name="pool-capacity-planning",
    version="0.1.0",
    description=(
        "Sizes nodes, drives, memory and erasure coding for object storage pools"
    ),
    python_requires=">=3.10,<3.14",
    packages=setuptools.find_packages(exclude=("tests*",)),
    install_requires=[
        "pydantic>2.0",
        "numpy",
        "isodate",
    ],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    entry_points={
        "console_scripts": [
            "plan-pool = pool_capacity_planning.tools.plan_pool:main",
        ]
    },
)
