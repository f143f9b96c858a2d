"""
Seed payment gateway settings into site_settings from a .env file.

Reads BKASH_* and SSL_* variables, e.g. BKASH_APP_KEY, SSL_STORE_ID, and
upserts them as bkash_app_key / ssl_store_id rows. Existing rows are only
overwritten with --force.
"""
import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import select

from storefront.database import get_db_context
from storefront.models.site_setting import SiteSetting
from storefront.services.gateways import GATEWAYS


def collect_settings() -> dict:
    values = {}
    for method, gateway_class in GATEWAYS.items():
        prefix = method.settings_prefix
        for key in gateway_class.setting_keys:
            env_value = os.environ.get(f"{prefix}{key}".upper())
            if env_value is not None and env_value != "":
                values[f"{prefix}{key}"] = env_value
    return values


async def seed(force: bool = False):
    values = collect_settings()
    if not values:
        print("No BKASH_* / SSL_* variables found. Nothing to seed.")
        return

    async with get_db_context() as db:
        result = await db.execute(select(SiteSetting).where(SiteSetting.key.in_(list(values))))
        existing = {setting.key: setting for setting in result.scalars().all()}

        for key, value in values.items():
            if key in existing:
                if force:
                    existing[key].value = value
                    print(f"Updated {key}")
                else:
                    print(f"Skipped {key} (exists)")
            else:
                db.add(SiteSetting(key=key, value=value))
                print(f"Added {key}")

    configured = [m.display_name for m in GATEWAYS if any(k.startswith(m.settings_prefix) for k in values)]
    print(f"Seeded settings for: {', '.join(configured)}")


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(seed(force="--force" in sys.argv))
