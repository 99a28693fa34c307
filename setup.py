from setuptools import setup, find_packages

setup(
    name='statsig-client-core',
    version='0.1.0',
    license='ISC',
    package_dir={'': 'py_src'},
    packages=find_packages(where='py_src'),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'requests>=2.27',
        'typing_extensions>=4.0',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-httpserver',
            'werkzeug',
        ],
    },
)
