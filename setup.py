from setuptools import setup, find_packages

VERSION = "0.1.0"

def get_description():
    return "\
machineimage validates the settings used to build a Google Compute Engine \
machine image and checks, before the build starts, that the target machine \
image does not already exist in the project."

setup(
    name="machineimage",
    version=VERSION,
    description="Validate machine image builds and check for existing images",
    long_description=get_description(),
    long_description_content_type="text/markdown",
    author="Jesús Daniel Colmenares Oviedo",
    author_email="DtxdF@disroot.org",
    classifiers=[
        "License :: OSI Approved :: BSD License",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Systems Administration",
        "Topic :: Utilities"
    ],
    package_dir={"" : "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    license="BSD 3-Clause",
    python_requires=">=3.8",
    install_requires=[
        "click",
        "pyaml-env",
        "python-dotenv",
        "humanfriendly",
        "pyyaml"
    ],
    extras_require={
        "test" : [
            "pytest"
        ]
    },
    entry_points={
        "console_scripts" : [
            "machineimage = machineimage:cli"
        ]
    }
)
