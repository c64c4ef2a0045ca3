from setuptools import setup, find_packages

with open('README.md', 'r') as readme:
    long_description = readme.read()

setup(
    name='hsplyne', 
    version='1.0.0', 
    description='A package for 2D Hermite splines through their control points.', 
    long_description=long_description, 
    long_description_content_type='text/markdown', 
    packages=find_packages(exclude=['tests', 'tests.*']), 
    install_requires=['numpy', 'numba', 'scipy', 'matplotlib'], 
    extras_require={'test': ['pytest']}, 
    python_requires='>=3.9', 
    classifiers=['Programming Language :: Python :: 3', 
                 'Operating System :: OS Independent'], 
    
)
