"""
Store operations: cart, orders, catalog and the admin session gate.

Every function takes the Database container it works on. None of them
check authorization; the HTTP layer gates the admin operations.
"""
import itertools
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from passlib.context import CryptContext

from database import Database, find_by_id
from schemas import AdminStats, Book, BookCreate, CartItem, CustomerDetails, Order

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5

# Use pbkdf2_sha256 to avoid bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ADMIN_PASSWORD_HASH = pwd_context.hash(os.getenv("ADMIN_PASSWORD", "admin123"))

_sequence = itertools.count(1)


def _new_id(prefix: str) -> str:
    # millisecond clock plus a process counter keeps ids unique within the same tick
    return f"{prefix}{int(time.time() * 1000)}{next(_sequence):04d}"


# ------------------------- Cart -------------------------------
def add_to_cart(db: Database, book: Book) -> List[CartItem]:
    """Add one unit of `book`, merging with an existing entry for the same id.

    Stock is not checked here.
    """
    if any(item.book.id == book.id for item in db.cart):
        db.cart = [
            item.model_copy(update={"quantity": item.quantity + 1}) if item.book.id == book.id else item
            for item in db.cart
        ]
    else:
        db.cart = db.cart + [CartItem(book=book.model_copy(deep=True), quantity=1)]
    return db.cart


def remove_from_cart(db: Database, book_id: str) -> List[CartItem]:
    db.cart = [item for item in db.cart if item.book.id != book_id]
    return db.cart


def clear_cart(db: Database) -> None:
    db.cart = []


def cart_total(items: Iterable[CartItem]) -> float:
    return sum(item.book.price * item.quantity for item in items)


def get_cart(db: Database) -> Dict[str, Any]:
    items = list(db.cart)
    return {"items": items, "total": cart_total(items), "count": sum(i.quantity for i in items)}


# ------------------------- Orders -----------------------------
def place_order(db: Database, customer: Union[CustomerDetails, dict], payment_method: str) -> Order:
    """Turn the current cart into an order.

    Stock is decremented (floored at zero) and `sold` incremented for each
    carted book, the order is prepended to the order list and the cart is
    emptied. No validation happens here: an empty cart produces an empty,
    zero-amount order.
    """
    if isinstance(customer, dict):
        customer = CustomerDetails(**customer)
    snapshot = [item.model_copy(deep=True) for item in db.cart]
    quantities: Dict[str, int] = {}
    for item in snapshot:
        quantities[item.book.id] = quantities.get(item.book.id, 0) + item.quantity

    order = Order(
        id=_new_id("ORD-"),
        customer_name=customer.name,
        customer_email=customer.email,
        items=snapshot,
        total_amount=cart_total(snapshot),
        status="Pending",
        payment_method=payment_method,
        date=datetime.now(timezone.utc),
    )

    db.books = [
        book.model_copy(update={
            "stock": max(0, book.stock - quantities[book.id]),
            "sold": book.sold + quantities[book.id],
        }) if book.id in quantities else book
        for book in db.books
    ]
    db.orders = [order] + db.orders
    clear_cart(db)
    logger.info("Order %s placed: %d items, total %.2f", order.id, len(snapshot), order.total_amount)
    return order


def get_order(db: Database, order_id: str) -> Optional[Order]:
    return find_by_id(db.orders, order_id)


def update_order_status(db: Database, order_id: str, status: str) -> Optional[Order]:
    """Overwrite an order's status. Any status may follow any other; unknown ids are ignored."""
    if find_by_id(db.orders, order_id) is None:
        return None
    db.orders = [o.model_copy(update={"status": status}) if o.id == order_id else o for o in db.orders]
    return find_by_id(db.orders, order_id)


# ------------------------- Catalog ----------------------------
def list_books(
    db: Database,
    q: Optional[str] = None,
    category: Optional[str] = None,
    language: Optional[str] = None,
) -> List[Book]:
    books = list(db.books)
    if q:
        needle = q.lower()
        books = [b for b in books if needle in b.title.lower() or needle in b.author.lower() or needle in b.genre.lower()]
    if category:
        books = [b for b in books if b.category.lower() == category.lower()]
    if language:
        books = [b for b in books if b.language.lower() == language.lower()]
    return books


def get_book(db: Database, book_id: str) -> Optional[Book]:
    return find_by_id(db.books, book_id)


def add_book(db: Database, data: Union[BookCreate, dict]) -> Book:
    payload = data.model_dump() if isinstance(data, BookCreate) else dict(data)
    payload.pop("id", None)
    payload.pop("sold", None)
    book = Book(**payload, id=_new_id("b"), sold=0)
    db.books = db.books + [book]
    return book


def update_book(db: Database, book_id: str, patch: Dict[str, Any]) -> Optional[Book]:
    """Shallow-merge `patch` into the matching book; no-op when absent.

    The merged record is validated, so a bad patch raises ValidationError
    and leaves the catalog untouched.
    """
    current = find_by_id(db.books, book_id)
    if current is None:
        return None
    patch = {k: v for k, v in patch.items() if k != "id"}
    updated = Book.model_validate({**current.model_dump(), **patch})
    db.books = [updated if b.id == book_id else b for b in db.books]
    return updated


def delete_book(db: Database, book_id: str) -> bool:
    remaining = [b for b in db.books if b.id != book_id]
    deleted = len(remaining) != len(db.books)
    db.books = remaining
    return deleted


# ------------------------- Admin session ----------------------
def login_admin(db: Database, password: str) -> bool:
    if not pwd_context.verify(password, ADMIN_PASSWORD_HASH):
        logger.warning("Rejected admin login attempt")
        return False
    db.is_admin = True
    logger.info("Admin session opened")
    return True


def logout_admin(db: Database) -> None:
    db.is_admin = False


def low_stock_books(db: Database) -> List[Book]:
    return [b for b in db.books if b.stock < LOW_STOCK_THRESHOLD]


def get_admin_stats(db: Database) -> AdminStats:
    return AdminStats(
        total_revenue=sum(o.total_amount for o in db.orders),
        total_orders=len(db.orders),
        books_sold=sum(i.quantity for o in db.orders for i in o.items),
        low_stock_count=len(low_stock_books(db)),
    )
