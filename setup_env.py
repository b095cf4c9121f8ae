#!/usr/bin/env python
"""
Creates the .env file for local development
Usage: python setup_env.py
"""
import os
from pathlib import Path
from django.core.management.utils import get_random_secret_key

BASE_DIR = Path(__file__).resolve().parent
ENV_FILE = BASE_DIR / '.env'
ENV_EXAMPLE = BASE_DIR / '.env.example'


def create_env_file():
    """Copy .env.example to .env with a freshly generated SECRET_KEY and ADMIN_TOKEN"""

    if ENV_FILE.exists():
        print(f"⚠️  {ENV_FILE} already exists!")
        response = input("Overwrite? (y/n): ")
        if response.lower() != 'y':
            print("Cancelled.")
            return

    if not ENV_EXAMPLE.exists():
        print(f"❌ {ENV_EXAMPLE} not found!")
        return

    with open(ENV_EXAMPLE, 'r', encoding='utf-8') as f:
        content = f.read()

    secret_key = get_random_secret_key()
    admin_token = os.urandom(24).hex()
    print(f"🔑 Generated SECRET_KEY: {secret_key[:20]}...")
    print(f"🔑 Generated ADMIN_TOKEN: {admin_token[:8]}...")

    lines = content.split('\n')
    for i, line in enumerate(lines):
        if line.startswith('SECRET_KEY=') and 'django-insecure' in line:
            lines[i] = f'SECRET_KEY={secret_key}'
        elif line.strip() == 'ADMIN_TOKEN=':
            lines[i] = f'ADMIN_TOKEN={admin_token}'

    with open(ENV_FILE, 'w', encoding='utf-8') as f:
        f.write('\n'.join(lines))

    print(f"✅ {ENV_FILE} created!")
    print(f"\n💡 For production remember to:")
    print(f"   - set DEBUG=False")
    print(f"   - list the real ALLOWED_HOSTS")
    print(f"   - fill in the SMTP_* settings to send real emails")


if __name__ == '__main__':
    try:
        create_env_file()
    except ImportError:
        print("❌ Error: Django is not installed or not on PYTHONPATH")
        print("💡 Try: pip install -e .")
        print("\nOr create .env by hand from .env.example")
