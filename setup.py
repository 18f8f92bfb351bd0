# -*- coding: utf-8 -*-
from setuptools import setup

packages = \
['hekeys',
 'hekeys.backend',
 'hekeys.backend.openfhe',
 'hekeys.backend.python',
 'hekeys.core']

install_requires = \
['PyYAML>=6.0',
 'h5py>=3.5.0',
 'numpy>=1.21.0',
 'openfhe>=1.2.0']

extras_require = \
{'test': ['pytest>=7.0']}

entry_points = \
{'console_scripts': ['hekeys = hekeys.cli:main']}

setup_kwargs = {
    'name': 'hekeys',
    'version': '1.0.0',
    'description': 'Key custody for leveled BGV homomorphic encryption: generate, publish and reload key artifacts',
    'long_description': '# hekeys\n\nGenerate BGV-RNS keys once, publish them as text artifacts, and reload them into a fresh context.',
    'packages': packages,
    'install_requires': install_requires,
    'extras_require': extras_require,
    'entry_points': entry_points,
    'python_requires': '>=3.9',
}


setup(**setup_kwargs)
