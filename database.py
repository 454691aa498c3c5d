"""
In-Memory Store

State container for the book store. Nothing here is persisted: a fresh
container is seeded from catalog_seed and everything is lost on restart.
Import `get_db` as a FastAPI dependency in your endpoints.
"""

from datetime import datetime
import copy
from dotenv import load_dotenv
from typing import Union, Optional, List, Dict, Any
from pydantic import BaseModel

from catalog_seed import CATALOG, MOCK_ORDERS
from schemas import Book, CartItem, Order

# Load environment variables from .env file
load_dotenv()


class Database:
    """Single-session store state.

    Collections are replaced wholesale on every change; callers holding an
    older list keep seeing the old contents.
    """

    def __init__(self, books: Optional[List[Book]] = None, orders: Optional[List[Order]] = None):
        self.books: List[Book] = list(books or [])
        self.orders: List[Order] = list(orders or [])
        self.cart: List[CartItem] = []
        self.is_admin: bool = False

    def collection_counts(self) -> Dict[str, int]:
        return {"books": len(self.books), "orders": len(self.orders), "cart": len(self.cart)}


def _to_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def _seed_orders(books: List[Book]) -> List[Order]:
    orders = []
    for raw in MOCK_ORDERS:
        payload = _to_dict(raw)
        payload["items"] = [
            CartItem(book=books[index].model_copy(deep=True), quantity=quantity)
            for index, quantity in raw["items"]
        ]
        payload["date"] = datetime.fromisoformat(raw["date"].replace("Z", "+00:00"))
        orders.append(Order(**payload))
    return orders


def create_database(seed: bool = True) -> Database:
    """Build a fresh store, optionally seeded with the fixture catalog and orders"""
    if not seed:
        return Database()
    books = [Book(**copy.deepcopy(raw)) for raw in CATALOG]
    return Database(books=books, orders=_seed_orders(books))


db = create_database()


def get_db() -> Database:
    return db


def find_by_id(collection: List[Any], _id: str) -> Optional[Any]:
    return next((doc for doc in collection if doc.id == _id), None)
