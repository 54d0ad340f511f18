from setuptools import setup, find_packages

setup(
    name='cluster-manager',
    version='0.1.0',
    packages=find_packages(),
    include_package_data=True,
    install_requires=[
        'typer[all]',
        'kubernetes',
        'pydantic>=2',
        'python-dotenv',
        'PyYAML',
    ],
    extras_require={
        'test': [
            'pytest',
        ]
    },
    entry_points={
        'console_scripts': [
            'cluster-manager=cluster_manager.cli:app'
        ]
    },
    author='Your Name',
    description='A small CLI for day-to-day Kubernetes cluster operations through kubectl',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
