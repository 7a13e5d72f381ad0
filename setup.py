# -*- coding: utf-8 -*-
"""rsecret-operator a kubernetes operator syncing external secrets into Secrets.

Watches RSecret custom resources and materializes the values they reference in
parameter store, secrets manager, cloudformation or pulumi stack outputs, appconfig,
vault or plain text as a kubernetes Secret, rewriting it only when the content changes.

"""

import setuptools
import re
from io import open

VERSIONFILE="rsecret_operator/_version.py"
verstrline = open(VERSIONFILE, "rt").read()
VSRE = r"^__version__ = ['\"]([^'\"]*)['\"]"
mo = re.search(VSRE, verstrline, re.M)
if mo:
    verstr = mo.group(1)
else:
    raise RuntimeError("Unable to find version string in %s." % (VERSIONFILE,))

with open("README.md", "r", encoding='utf-8') as fh:
    long_description = fh.read()

setuptools.setup(
    name='rsecret_operator',
    version=verstr,
    author="jerry153fish",
    description="A kubernetes operator that syncs secrets from external backends into kubernetes secrets and only rewrites them when their content changes",
    long_description_content_type="text/markdown",
    long_description=long_description,
    packages=setuptools.find_packages(),
    python_requires=">=3.9",
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    license="MIT",
    scripts=[],
    install_requires=[
        "kopf>=1.36",
        "kubernetes>=26.0",
        "boto3~=1.26",
        "google-cloud-secret-manager~=2.0",
        "google-auth~=2.0",
        "google-crc32c~=1.0",
        "grpcio~=1.0",
        "hvac>=1.1",
        "requests~=2.0",
        "prometheus-client>=0.16",
        "python-dateutil~=2.0",
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],

)
