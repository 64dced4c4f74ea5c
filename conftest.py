"""
Root pytest configuration for the Django project.

pytest-django reads DJANGO_SETTINGS_MODULE from pyproject.toml; settings
themselves come from .env.development at the repository root.
Project-wide fixtures live in app/conftest.py and app-specific fixtures in
each app's tests/conftest.py.
"""

import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
