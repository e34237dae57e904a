"""
Installs the atria package: pip install -e .[test]
"""

from setuptools import setup

setup(
    name='atria',
    version='0.1.0',
    packages=['atria', 'atria.algos', 'atria.metrics', 'atria.tools'],
    description='Ablatio Triadum (ATria) centrality for directed, weighted and signed networks',
    author='Joseph R. Quinn',
    license='MIT',
    python_requires='>=3.9',
    install_requires=[
        'networkx>=2.6',
        'numba>=0.57',
        'numba-progress>=0.0.4',
        'numpy>=1.23',
        'pandas>=1.5',
        'tqdm',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
