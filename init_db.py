# init_db.py
from dotenv import load_dotenv

load_dotenv()

from database import setup_database_standalone

print("Creating title_records table (if missing)...")
setup_database_standalone()
print("Database initialization complete.")
