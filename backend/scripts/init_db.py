# scripts/init_db.py

import os, sys
sys.path.append(os.path.dirname(os.path.dirname(__file__)))  # ajoute backend/ au PYTHONPATH

from export_urls.core.config import settings
from export_urls.db.base import init_db
from export_urls.db.seed import seed_initial_data

if __name__ == "__main__":
    if settings.DATABASE_URL.startswith("sqlite:///"):
        db_dir = os.path.dirname(settings.DATABASE_URL[len("sqlite:///"):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
    os.makedirs(settings.uploads_dir(), exist_ok=True)
    init_db()
    if seed_initial_data(
        os.getenv("ADMIN_EMAIL", "admin@site.org"),
        os.getenv("ADMIN_PASSWORD", "adminpass"),
    ):
        print("Admin et types de contenu de base ajoutés")
    print("Base de données initialisée avec succès.")
