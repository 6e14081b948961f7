# Catalog
from inventory_api.models.catalog.category_models import Category
from inventory_api.models.catalog.product_models import Product
from inventory_api.models.catalog.ledger_models import ProductTransaction, QuantityHistory

# Users and auth
from inventory_api.models.users.user_models import User, RefreshToken
