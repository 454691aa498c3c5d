import logging
import os
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from jose import JWTError, jwt

from database import Database, get_db
from gemini_service import (
    ChatBusyError,
    ChatSession,
    MissingAPIKeyError,
    generate_marketing_copy,
    get_chat_session,
)
from schemas import AdminStats, Book, BookCreate, BookUpdate, CartItem, ChatMessage, CustomerDetails, Order, OrderStatus
import store

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Security settings
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

app = FastAPI(title="Kavithedal Book Store API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------- Auth Models -------------------------
class LoginRequest(BaseModel):
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# ------------------------- Helpers ----------------------------
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_admin(token: str = Depends(oauth2_scheme), db: Database = Depends(get_db)) -> str:
    credentials_exception = HTTPException(
        status_code=401,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception
    if payload.get("role") != "admin":
        raise credentials_exception
    # Logging out closes the session for every token issued before it
    if not db.is_admin:
        raise credentials_exception
    return payload.get("sub", "admin")


@app.on_event("startup")
async def report_configuration():
    if not (os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY")):
        logger.warning("API_KEY is not set; chat and marketing endpoints will fail")


# ------------------------- Basic Routes -----------------------
@app.get("/")
def root():
    return {"message": "Kavithedal Book Store API"}


@app.get("/test")
def test_store(db: Database = Depends(get_db)):
    return {
        "backend": "✅ Running",
        "store": "✅ In-memory",
        "collections": db.collection_counts(),
        "admin_session": "Open" if db.is_admin else "Closed",
        "api_key": "✅ Set" if (os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY")) else "❌ Not Set",
    }


# ------------------------- Auth Endpoints ---------------------
@app.post("/auth/login", response_model=Token)
def admin_login(payload: LoginRequest, db: Database = Depends(get_db)):
    if not store.login_admin(db, payload.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return Token(access_token=create_access_token({"sub": "admin", "role": "admin"}))


@app.post("/auth/logout")
def admin_logout(db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    store.logout_admin(db)
    return {"status": "logged out"}


# ------------------------- Dashboard Widgets ------------------
@app.get("/admin/stats", response_model=AdminStats)
def get_admin_stats(db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    return store.get_admin_stats(db)


@app.get("/admin/low-stock", response_model=List[Book])
def get_low_stock(db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    return store.low_stock_books(db)


# ------------------------- Books CRUD -------------------------
@app.get("/books", response_model=List[Book])
def list_books(
    q: Optional[str] = None,
    category: Optional[str] = None,
    language: Optional[str] = None,
    db: Database = Depends(get_db),
):
    return store.list_books(db, q=q, category=category, language=language)


@app.get("/books/{book_id}", response_model=Book)
def get_book(book_id: str, db: Database = Depends(get_db)):
    book = store.get_book(db, book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@app.post("/books", response_model=Book, status_code=201)
def create_book(payload: BookCreate, db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    return store.add_book(db, payload)


@app.put("/books/{book_id}", response_model=Book)
def update_book(book_id: str, payload: BookUpdate, db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    book = store.update_book(db, book_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@app.delete("/books/{book_id}")
def delete_book(book_id: str, db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    if not store.delete_book(db, book_id):
        raise HTTPException(status_code=404, detail="Book not found")
    return {"status": "deleted"}


# ------------------------- Cart -------------------------------
class CartAdd(BaseModel):
    book_id: str


class CartView(BaseModel):
    items: List[CartItem]
    total: float
    count: int


@app.get("/cart", response_model=CartView)
def get_cart(db: Database = Depends(get_db)):
    return store.get_cart(db)


@app.post("/cart/items", response_model=CartView)
def add_cart_item(payload: CartAdd, db: Database = Depends(get_db)):
    book = store.get_book(db, payload.book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    store.add_to_cart(db, book)
    return store.get_cart(db)


@app.delete("/cart/items/{book_id}", response_model=CartView)
def remove_cart_item(book_id: str, db: Database = Depends(get_db)):
    store.remove_from_cart(db, book_id)
    return store.get_cart(db)


@app.delete("/cart", response_model=CartView)
def clear_cart(db: Database = Depends(get_db)):
    store.clear_cart(db)
    return store.get_cart(db)


# ------------------------- Orders -----------------------------
class CheckoutRequest(BaseModel):
    customer: CustomerDetails
    payment_method: str = "upi"


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


@app.post("/checkout", response_model=Order, status_code=201)
def checkout(payload: CheckoutRequest, db: Database = Depends(get_db)):
    if not db.cart:
        raise HTTPException(status_code=400, detail="Cart is empty")
    if not (payload.customer.name or "").strip() or not (payload.customer.address or "").strip():
        raise HTTPException(status_code=400, detail="Name and address are required")
    return store.place_order(db, payload.customer, payload.payment_method)


@app.get("/orders", response_model=List[Order])
def list_orders(db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    return db.orders


@app.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: str, db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    order = store.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@app.put("/orders/{order_id}/status", response_model=Order)
def update_order_status(order_id: str, payload: OrderStatusUpdate, db: Database = Depends(get_db), admin: str = Depends(get_current_admin)):
    order = store.update_order_status(db, order_id, payload.status)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


# ------------------------- Assistant --------------------------
class ChatRequest(BaseModel):
    text: str


class MarketingRequest(BaseModel):
    topic: str


@app.get("/chat/messages", response_model=List[ChatMessage])
def list_chat_messages(session: ChatSession = Depends(get_chat_session)):
    return session.messages


@app.post("/chat/messages")
def send_chat_message(payload: ChatRequest, session: ChatSession = Depends(get_chat_session)):
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message is empty")
    try:
        stream = session.send_message(text)
    except ChatBusyError:
        raise HTTPException(status_code=409, detail="A reply is already in progress")
    except MissingAPIKeyError:
        raise HTTPException(status_code=503, detail="Assistant is not configured")
    return StreamingResponse(stream, media_type="text/plain; charset=utf-8")


@app.post("/marketing/copy")
def marketing_copy(payload: MarketingRequest, admin: str = Depends(get_current_admin)):
    try:
        text = generate_marketing_copy(payload.topic)
    except MissingAPIKeyError:
        raise HTTPException(status_code=503, detail="Assistant is not configured")
    return {"topic": payload.topic, "text": text}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
