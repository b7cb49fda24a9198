from setuptools import setup, find_packages
import sys

if sys.version_info < (3,):
    print("Please use python3.")
    sys.exit(1)


requires = [
    "pyramid",
    "python-dotenv",
    "requests",
    "webob",
    "zope.interface",
]

test_deps = ["pytest"]


setup(
    name="shopinstall",
    version="0.1a",
    description="Shopify oauth install flow and product catalog proxy.",
    install_requires=requires,
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"shopinstall": ["public/*.html"]},
    include_package_data=True,
    zip_safe=False,
    extras_require={
        "test": test_deps,
        "dev": test_deps + ["flake8", "black"],
    },
    entry_points={
        "console_scripts": [
            "shopinstall-serve = shopinstall.web.app:main",
        ],
    },
)
