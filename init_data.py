from herbmarket import create_app
from herbmarket.extensions import db
from herbmarket.services.data_manager import CURRENT_DATA_VERSION
from herbmarket.utils import get_data_manager

app = create_app()

with app.app_context():
    # Make sure the key-value table exists when running without migrations
    db.create_all()

    manager = get_data_manager()
    if not manager.is_demo_mode():
        print("BACKEND_URL is configured; demo data is not used.")
    elif manager.initialize():
        print(f"Demo data initialized at version {CURRENT_DATA_VERSION}")
    else:
        print(f"Demo data already at version {CURRENT_DATA_VERSION}")

    repos = manager.repos
    print(f"Catalog products: {len(repos.products.get_all())}")
    print(f"Seller products: {len(repos.seller_products.get_all())}")
    print(f"Users: {len(repos.users.get_all())}")
    for user in repos.users.get_all():
        print(f"  {user['role']}: {user.get('email')} - "
              f"{user.get('business_name')}")
    print(f"Group buy activities: {len(repos.group_buys.get_all())}")

    backfilled = manager.backfill_reviews()
    if backfilled:
        print(f"Auto-approved {backfilled} existing seller products")

    print("Data initialization completed!")
