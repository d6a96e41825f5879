#!/usr/bin/env python3
"""Check the .env file and settings used by the AquaTrack API, creating a template if missing."""

from pathlib import Path
import os
import sys

ENV_TEMPLATE = """# Supabase Configuration (leave empty to run on the in-memory store)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
AQUATRACK_SUPABASE_URL=https://your-project-id.supabase.co
AQUATRACK_SUPABASE_KEY=your-service-role-key-here
# AQUATRACK_SUPABASE_SCHEMA=public
# AQUATRACK_SUPABASE_TIMEOUT=10

# API Configuration
AQUATRACK_API_PREFIX=/api
# AQUATRACK_FRONTEND_ALLOWED_ORIGINS=http://localhost:5173,http://127.0.0.1:5173

# Pricing and container policy
AQUATRACK_BOTTLE_PRICE=20
AQUATRACK_JUG_PRICE=40
# auto: every unit delivered to a one-time customer is a loaned container
# explicit: only orders flagged uses_company_container are tracked
AQUATRACK_CONTAINER_TRACKING=auto
AQUATRACK_BUSINESS_TIMEZONE=Asia/Kolkata

# Local development without Supabase auth: role granted to every caller
# AQUATRACK_DEV_ROLE=admin
"""

SECRET_KEYS = ("AQUATRACK_SUPABASE_KEY",)


def _mask(line: str) -> str:
    name, _, value = line.partition("=")
    value = value.strip()
    if name.strip() in SECRET_KEYS and len(value) > 20:
        return f"{name}={value[:20]}...{value[-10:]}"
    return line


def main() -> None:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("AquaTrack Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Edit .env and add your Supabase credentials, then run this again.")
        return

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        print(_mask(line))
    print("-" * 60)
    print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from aquatrack.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    print(f"Prices: bottle={settings.bottle_price} jug={settings.jug_price}")
    print(f"Container tracking: {settings.container_tracking}")
    print(f"Business timezone: {settings.business_timezone}")
    print()

    if settings.supabase_url and settings.supabase_key:
        print("=" * 60)
        print("✅ SUCCESS: Supabase is configured!")
        print("=" * 60)
    else:
        print("=" * 60)
        print("⚠️  Supabase is NOT configured - the API will use the in-memory store")
        print("=" * 60)
        print()
        print("Troubleshooting:")
        print("1. Make sure variables start with the AQUATRACK_ prefix")
        print("2. Make sure there are no spaces around = sign")
        print(f"3. Environment currently has AQUATRACK_SUPABASE_URL={'set' if os.getenv('AQUATRACK_SUPABASE_URL') else 'unset'}")
        if settings.dev_role:
            print(f"4. Every caller will be treated as '{settings.dev_role}'")


if __name__ == "__main__":
    main()
