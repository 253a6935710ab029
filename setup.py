import re
from setuptools import setup, find_packages

# Read version without importing the package (and its dependencies)
with open("slicetrack/__init__.py", "r") as fh:
    version = re.search(
        r"^__version__ = ['\"]([^'\"]*)['\"]", fh.read(), re.M).group(1)

# Read long description
with open("README.md", "r") as fh:
    long_description = fh.read()

def read_requirements():
    with open('requirements.txt') as f:
        return [line.strip() for line in f.readlines() if line.strip()]

# Main setup command
setup(
    name='SliceTrack',
    version=version,
    description=('Slice-based symplectic tracking of charged particle beams '
                 'through accelerator beamlines'),
    long_description=long_description,
    long_description_content_type="text/markdown",
    license='GPLv3',
    packages=find_packages('.', include=['slicetrack', 'slicetrack.*']),
    install_requires=read_requirements(),
    extras_require={
        'mpi': ['mpi4py'],
        'test': ['pytest'],
    },
    python_requires='>=3.8',
    platforms='any',
    classifiers=(
        "Development Status :: 1 - Planning",
        "Programming Language :: Python :: 3",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Physics",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: OS Independent"),
    )
