import asyncio

from mushi.db.database import get_store
from mushi.seeds.seed_templates import seed_templates


async def main():
    print("Starting DB seeding...")

    await seed_templates(get_store())

    print("All seeders completed!")

if __name__ == "__main__":
    asyncio.run(main())
