from setuptools import setup, find_packages

setup(
    name='praykit',
    version='0.1.0',
    author='Virgil',
    author_email='virgil@example.com',
    description='Read and write Creatures PRAY agent files and BLK/S16/C16 sprites',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    url='https://github.com/example/praykit',
    packages=find_packages(include=['praykit', 'praykit.*']),
    install_requires=[
        'numpy>=1.20.0',
        'opencv-python>=4.5.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'praykit=praykit.cli:main',
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
        'Topic :: Games/Entertainment :: Simulation',
        'Topic :: Multimedia :: Graphics',
    ],
    python_requires='>=3.8',
    include_package_data=True,
    package_data={
        'praykit': ['py.typed'],
    },
)
