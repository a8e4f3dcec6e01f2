import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database.engine import engine, initialize_db

async def create_tables():
    """
    Create the snapshot table for the configured database_url.
    """
    await initialize_db()
    await engine.dispose()

import asyncio
asyncio.run(create_tables())
