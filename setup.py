from setuptools import setup, find_packages
from pathlib import Path
from runpy import run_path

from extreqs import parse_requirement_files

HERE = Path(__file__).resolve().parent

verstr = run_path(str(HERE / "nglseg" / "__version__.py"))["__version__"]

install_requires, extras_require = parse_requirement_files(
    HERE / "requirements.txt",
)

dev_only = ["dev"]
all_dev_deps = []
all_deps = []
for k, v in extras_require.items():
    all_dev_deps.extend(v)
    if k not in dev_only:
        all_deps.extend(v)

extras_require["all"] = all_deps
extras_require["all-dev"] = all_dev_deps

with open(HERE / "README.md") as f:
    long_description = f.read()

setup(
    name='nglseg',
    version=verstr,
    packages=find_packages(include=["nglseg", "nglseg.*"]),
    license='GNU GPL V3',
    description='Fetch and assemble neuron meshes from Neuroglancer segmentations',
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords='Neuroglancer Segmentation Connectomics Meshes CloudVolume FlyWire FAFB Neuroscience',
    classifiers=[
        'Development Status :: 4 - Beta',

        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Bio-Informatics',

        'License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)',

        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    install_requires=install_requires,
    extras_require=dict(extras_require),
    python_requires='>=3.9,<4.0',
    zip_safe=False,

    include_package_data=True

)
