from setuptools import setup, find_packages

setup(
    name='partlint',
    version='0.1.0',
    author='Virgil',
    author_email='virgil@example.com',
    description='Pre-export checklist for MeshPart assets - triangle budgets, stud scale, UVs, palettes and naming',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    url='https://github.com/example/partlint',
    packages=find_packages(include=['partlint', 'partlint.*']),
    install_requires=[
        'numpy>=1.20.0',
        'opencv-python>=4.5.0',
        'trimesh>=4.0.0',
        'scipy>=1.10.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
            'pillow>=8.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'partlint=partlint.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'License :: Other/Proprietary License',
        'Operating System :: OS Independent',
        'Topic :: Multimedia :: Graphics :: 3D Modeling',
        'Topic :: Software Development :: Quality Assurance',
    ],
    python_requires='>=3.8',
    include_package_data=True,
    package_data={
        'partlint': ['py.typed'],
    },
)
