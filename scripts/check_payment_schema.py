import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text
from storefront.database import engine

REQUIRED_COLUMNS = {
    "payments": {"transaction_id", "gateway_session_id", "gateway_transaction_id", "payment_date"},
    "enrollments": {"student_id", "course_id", "status"},
    "site_settings": {"key", "value"},
}


async def check_payment_schema():
    if engine is None:
        print("DATABASE_URL not set.")
        return

    async with engine.begin() as conn:
        print("Checking payment tables...")
        for table, required in REQUIRED_COLUMNS.items():
            result = await conn.execute(text(
                "SELECT column_name FROM information_schema.columns "
                "WHERE table_schema = 'public' AND table_name = :table"
            ), {"table": table})
            columns = {row[0] for row in result.fetchall()}
            missing = sorted(required - columns)
            print(f"{table}: {'OK' if not missing else f'missing {missing}'}")

        result = await conn.execute(text(
            "SELECT constraint_name FROM information_schema.table_constraints "
            "WHERE table_name = 'enrollments' AND constraint_type = 'UNIQUE'"
        ))
        constraints = [row[0] for row in result.fetchall()]
        print(f"enrollments unique constraints: {constraints}")

    await engine.dispose()

if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(check_payment_schema())
