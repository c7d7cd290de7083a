from typing import Optional

from sqlmodel import Session

from printqueue.models.product import Product


def find_product(session: Session, product_id: Optional[int]) -> Optional[Product]:
    """Produkt-Lookup; der Katalog selbst wird außerhalb der Fila gepflegt."""
    if not product_id:
        return None
    return session.get(Product, product_id)
