from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.catalog import Artisan, Sejour, Caravane
from app.schemas.reservation import ItemType

CATALOG_MODELS = {
    ItemType.ARTISANAT: Artisan,
    ItemType.SEJOUR: Sejour,
    ItemType.CARAVANE: Caravane,
}


def get_catalog_item(db: Session, item_type: ItemType | str, item_id: int):
    model = CATALOG_MODELS[ItemType(item_type)]
    item = db.get(model, item_id)
    if not item:
        raise NotFoundError(f"{ItemType(item_type).value} with id {item_id} does not exist")
    return item


def catalog_item_details(db: Session, item_type: str, item_id: int) -> dict | None:
    """Current catalog row for admin views; None once the item has been removed."""
    try:
        item = get_catalog_item(db, item_type, item_id)
    except NotFoundError:
        return None
    return {"id": item.id, "name": item.name, "city": item.city, "price": str(item.price)}
