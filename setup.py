from setuptools import find_packages, setup


extras_require = {}

extras_require["test"] = [
    'botocore>=1.31',
    'pytest>=7.4,<9.0'
]


setup(
    name='db-adapter-dynamodb',
    version='2.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    license='MIT',
    description='DynamoDB adapter for generic database services',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=[
        'pynamodb>=5.5,<7',
        'python-dotenv>=1.0.0,<2.0'
    ],
    extras_require=extras_require,
    python_requires=">=3.10"
)
