"""
Store Schemas

Pydantic models for the in-memory book store state.
Each collection held by the Database container is a list of one of these models:
- Book -> "books"
- Order -> "orders"
- CartItem -> "cart"
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List, Literal

Language = Literal["Tamil", "English"]
OrderStatus = Literal["Pending", "Shipped", "Delivered", "Cancelled"]


class BookCreate(BaseModel):
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author name")
    genre: str = Field("", description="Genre, e.g. Historical Fiction")
    category: str = Field("Fiction", description="Fiction | Non-Fiction | Poetry | History")
    price: float = Field(..., gt=0, description="Price in INR")
    description: str = Field("", description="Description")
    cover_url: str = Field("", description="Cover image URL")
    pages: int = Field(0, ge=0, description="Page count")
    language: Language = Field("Tamil", description="Tamil | English")
    isbn: str = Field("", description="ISBN")
    stock: int = Field(0, ge=0, description="Stock count")


class Book(BookCreate):
    id: str = Field(..., description="Stable unique id")
    sold: int = Field(0, ge=0, description="Units sold so far")


class BookUpdate(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    cover_url: Optional[str] = None
    pages: Optional[int] = Field(None, ge=0)
    language: Optional[Language] = None
    isbn: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)


class CartItem(BaseModel):
    book: Book = Field(..., description="Snapshot of the book when added")
    quantity: int = Field(..., ge=1, description="Quantity in cart")


class CustomerDetails(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None


class Order(BaseModel):
    id: str = Field(..., description="Order id, e.g. ORD-001")
    customer_name: Optional[str] = Field(None, description="Customer name")
    customer_email: Optional[str] = Field(None, description="Customer email")
    items: List[CartItem] = Field(default_factory=list, description="Value copy of the cart at checkout")
    total_amount: float = Field(..., ge=0, description="Computed total amount")
    status: OrderStatus = Field("Pending", description="Order status")
    payment_method: str = Field("", description="Payment method label")
    date: datetime = Field(..., description="Creation timestamp (UTC)")


class ChatMessage(BaseModel):
    id: str
    role: Literal["user", "model"]
    text: str = ""
    timestamp: datetime
    is_streaming: bool = False


class AdminStats(BaseModel):
    total_revenue: float
    total_orders: int
    books_sold: int
    low_stock_count: int
