"""
setup.py for the lpbridge Python package

The solver engines are loaded at run time through ctypes, so nothing is
compiled here. Install GLPK (libglpk) and/or lp_solve 5.5 (liblpsolve55)
from your system package manager.
"""
from pathlib import Path
from setuptools import setup


# Read README for long description
readme_path = Path(__file__).parent / 'README.md'
long_description = readme_path.read_text(encoding='utf-8') if readme_path.exists() else ''

setup(
    name='lpbridge',
    version='0.1.0',
    author='lpbridge Contributors',
    description='LP/MIP modeling layer over the GLPK and lp_solve native solvers',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=['lpbridge', 'lpbridge.backends'],
    install_requires=[
        'numpy>=1.20.0',
        'scipy>=1.7.0',
    ],
    extras_require={
        'test': ['pytest>=7.0', 'scipy>=1.9.0'],
    },
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Mathematics',
    ],
    zip_safe=False,
)
