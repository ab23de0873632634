"""
Created by Epic at 9/4/20
"""
from setuptools import setup, find_packages
import re

with open('shardlink/values.py') as f:
	version = re.search(r'^version\s*=\s*[\'"]([^\'"]*)[\'"]', f.read(), re.MULTILINE).group(1)

setup(
	name='shardlink',
	version=version,
	packages=find_packages(exclude=("tests", "tests.*")),
	package_data={"shardlink": ["*.pyi"]},
	url='https://github.com/tag-epic/shardlink',
	license='MIT',
	author='Epic',
	long_description=open("README.md").read(),
	long_description_content_type="text/markdown",
	install_requires=["aiohttp>=3.10", "ujson"],
	description='Keeps sharded discord gateway connections alive',
	python_requires='>=3.10',
)
