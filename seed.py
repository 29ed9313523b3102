"""
Seed the default admin account and starter catalog.

    python seed.py
"""
import config
import database
from auth import get_password_hash
from logger import get_logger
from repositories import admins, products
from schemas import Admin, Product

_logger = get_logger(__name__)

DEFAULT_PRODUCTS = [
    {
        "title": "Jalani Pooja Samagri",
        "description": "Complete Tihar pooja kit with diyos, colors, oil, tika, and all essential items.",
        "image": "https://images.unsplash.com/photo-1606092195730-5d7b9af1efc5?w=400&h=300&fit=crop",
        "price": 500,
        "stock": 50,
        "category": "pooja-kit",
        "featured": True,
    },
    {
        "title": "Brass Diya Set",
        "description": "Handcrafted brass diyas for lighting during festivals. Set of 12 pieces.",
        "image": "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=400&h=300&fit=crop",
        "price": 850,
        "stock": 30,
        "category": "diya",
        "featured": True,
    },
    {
        "title": "Copper Kalash",
        "description": "Sacred copper kalash for pooja rituals and storing holy water.",
        "image": "https://images.unsplash.com/photo-1606092195730-5d7b9af1efc5?w=400&h=300&fit=crop",
        "price": 1200,
        "stock": 25,
        "category": "kalash",
    },
    {
        "title": "Incense Sticks Pack",
        "description": "Premium incense sticks in various fragrances. Pack of 100 sticks.",
        "image": "https://images.unsplash.com/photo-1606092195730-5d7b9af1efc5?w=400&h=300&fit=crop",
        "price": 350,
        "stock": 100,
        "category": "incense",
    },
    {
        "title": "Rudraksha Mala",
        "description": "Rudraksha prayer beads mala with 108 beads for meditation.",
        "image": "https://images.unsplash.com/photo-1606092195730-5d7b9af1efc5?w=400&h=300&fit=crop",
        "price": 2500,
        "stock": 20,
        "category": "mala",
    },
]


def seed_admin(username: str = None, password: str = None, email: str = None) -> bool:
    """Create the admin account unless one with the username exists. Returns True if created."""
    username = username or config.SEED_ADMIN_USERNAME
    if admins.find_by_username(username):
        _logger.info(f"Admin '{username}' already exists")
        return False
    admins.create(Admin(
        username=username,
        password=get_password_hash(password or config.SEED_ADMIN_PASSWORD),
        email=email or config.SEED_ADMIN_EMAIL,
    ))
    _logger.info(f"Admin '{username}' created")
    return True


def seed_products() -> int:
    if products.find_all_for_admin():
        _logger.info("Catalog already has products, skipping")
        return 0
    for item in DEFAULT_PRODUCTS:
        products.create(Product(**item))
    _logger.info(f"Inserted {len(DEFAULT_PRODUCTS)} products")
    return len(DEFAULT_PRODUCTS)


if __name__ == "__main__":
    if database.db is None:
        raise SystemExit("DATABASE_URL and DATABASE_NAME must be set")
    database.ensure_indexes()
    seed_admin()
    seed_products()
