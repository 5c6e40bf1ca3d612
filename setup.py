from setuptools import find_packages, setup

extras_require = {}

extras_require["dev"] = [
    'pytest>=7.4',
    'httpx>=0.24',
]

setup(
    name='faxbridge',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    license='MIT',
    description='A provider-agnostic gateway for sending and receiving faxes',
    entry_points={
        'console_scripts': [
            'faxbridge = faxbridge.client.cli:main',
        ],
    },
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=[
        'boto3>=1.28.55',
        'fastapi>=0.100',
        'python-dotenv>=1.0.0,<2.0',
        'pydantic>=2.0,<3.0',
        'python-multipart>=0.0.9',
        'requests>=2.31.0,<3.0',
        'uvicorn>=0.23'
    ],
    extras_require=extras_require,
    python_requires=">=3.10"
)
