"""
Seed data for the in-memory store: the starting catalog, a few historical
orders for the admin dashboard, store policies and the assistant's system
instruction.
"""
import json
from typing import List, Dict, Any

CATALOG: List[Dict[str, Any]] = [
    {
        "id": "b1",
        "title": "The Whispering Banyan",
        "author": "K. Arivazhagan",
        "genre": "Historical Fiction",
        "category": "Fiction",
        "price": 450.0,
        "description": "A gripping tale set in 19th century Madurai, exploring the secrets hidden within an ancient family lineage and a mystical banyan tree.",
        "cover_url": "https://picsum.photos/300/450?random=1",
        "pages": 320,
        "language": "Tamil",
        "isbn": "978-81-93456-01-2",
        "stock": 45,
        "sold": 120,
    },
    {
        "id": "b2",
        "title": "Echoes of the Cauvery",
        "author": "Sarah Thomas",
        "genre": "Contemporary Fiction",
        "category": "Fiction",
        "price": 350.0,
        "description": "A moving story about a young woman returning to her ancestral village along the Cauvery river to find herself amidst fading traditions.",
        "cover_url": "https://picsum.photos/300/450?random=2",
        "pages": 280,
        "language": "English",
        "isbn": "978-0-143-42567-8",
        "stock": 12,
        "sold": 85,
    },
    {
        "id": "b3",
        "title": "Modern Tamil Poetry: An Anthology",
        "author": "Various (Ed. Dr. R. Selvam)",
        "genre": "Poetry",
        "category": "Poetry",
        "price": 200.0,
        "description": "A carefully curated collection of modern Tamil poetry reflecting the angst, joy, and resilience of the contemporary Tamil psyche.",
        "cover_url": "https://picsum.photos/300/450?random=3",
        "pages": 150,
        "language": "Tamil",
        "isbn": "978-81-234-5678-9",
        "stock": 3,
        "sold": 210,
    },
    {
        "id": "b4",
        "title": "Digital Dravidian",
        "author": "S. Karthik",
        "genre": "Technology / Sociology",
        "category": "Non-Fiction",
        "price": 550.0,
        "description": "An analysis of how the digital revolution has transformed the cultural landscape of South India.",
        "cover_url": "https://picsum.photos/300/450?random=4",
        "pages": 410,
        "language": "English",
        "isbn": "978-1-567-89012-3",
        "stock": 25,
        "sold": 45,
    },
    {
        "id": "b5",
        "title": "Flavors of Kongu",
        "author": "Meenakshi Ammal",
        "genre": "Cookbook",
        "category": "Non-Fiction",
        "price": 800.0,
        "description": "A visual journey through the culinary heritage of the Kongu region, featuring 100+ authentic recipes.",
        "cover_url": "https://picsum.photos/300/450?random=5",
        "pages": 220,
        "language": "English",
        "isbn": "978-0-553-21311-9",
        "stock": 8,
        "sold": 300,
    },
    {
        "id": "b6",
        "title": "Vanathu Nila",
        "author": "J. Jayalalitha",
        "genre": "Romance",
        "category": "Fiction",
        "price": 299.0,
        "description": "A heartwarming romance novel about star-crossed lovers separated by distance but united by the moon.",
        "cover_url": "https://picsum.photos/300/450?random=6",
        "pages": 240,
        "language": "Tamil",
        "isbn": "978-81-701-2345-6",
        "stock": 50,
        "sold": 15,
    },
]

# items are (catalog index, quantity) pairs
MOCK_ORDERS: List[Dict[str, Any]] = [
    {
        "id": "ORD-001",
        "customer_name": "Ramesh Kumar",
        "customer_email": "ramesh@example.com",
        "items": [(0, 1), (2, 2)],
        "total_amount": 850.0,
        "status": "Delivered",
        "payment_method": "UPI",
        "date": "2024-05-10T14:30:00Z",
    },
    {
        "id": "ORD-002",
        "customer_name": "Priya S.",
        "customer_email": "priya@test.com",
        "items": [(4, 1)],
        "total_amount": 800.0,
        "status": "Shipped",
        "payment_method": "Credit Card",
        "date": "2024-05-12T09:15:00Z",
    },
    {
        "id": "ORD-003",
        "customer_name": "David Raj",
        "customer_email": "david@mail.com",
        "items": [(1, 1)],
        "total_amount": 350.0,
        "status": "Pending",
        "payment_method": "Net Banking",
        "date": "2024-05-14T11:20:00Z",
    },
]

POLICIES = """
SHIPPING POLICY:
- We ship worldwide.
- Domestic shipping (India) takes 3-5 business days. Free for orders above ₹500.
- International shipping takes 10-15 business days.
- Tracking number is provided via email within 24 hours of dispatch.

RETURNS & REFUNDS:
- Returns accepted within 7 days of delivery if the book is damaged.
- No returns for 'change of mind'.
- Refunds are processed within 5-7 business days to the original payment method.

PAYMENT GATEWAY:
- We accept Credit/Debit Cards (Visa, Mastercard, Rupay), UPI (GPay, PhonePe), and Net Banking via Razorpay.
- Cash on Delivery (COD) is available for select pin codes in Tamil Nadu and Karnataka.

CONTACT:
- Email: support@kavithedal.com
- Phone: +91-98765-43210 (10 AM - 6 PM IST)
"""


def _catalog_knowledge() -> str:
    # Stock figures are kept out of the assistant's knowledge
    return json.dumps([{k: v for k, v in b.items() if k != "stock"} for b in CATALOG], indent=2, ensure_ascii=False)


SYSTEM_INSTRUCTION = f"""
You are 'Kavi', the intelligent AI assistant for Kavithedal Publication.
Your goal is to assist customers in discovering books, answering questions about authors and content, solving order-related queries, and generating promotional content.

TONE:
- Warm, literary, knowledgeable, and helpful.
- Use an inviting tone, like a friendly librarian or a passionate bookstore owner.

KNOWLEDGE BASE:
1. CATALOG: You have access to the following books. Use this to recommend books based on user preferences (genre, language, price, etc.).
   {_catalog_knowledge()}

2. POLICIES: Use this for operational queries.
   {POLICIES}

GUIDELINES:
- If a user asks for book recommendations, ask clarifying questions if needed (e.g., "Do you prefer Fiction or Non-fiction?", "Tamil or English?").
- When recommending a book, mention its Title, Author, and a brief reason why it fits their request.
- If asking about shipping/payments, summarize the policy clearly.
- If asked to write a description or marketing post, be creative and engaging.
- If technical issues arise (e.g., payment failure), advise them to contact support@kavithedal.com.
- If a user wants to buy a book, encourage them to add it to their cart using the 'Add' button.
"""

WELCOME_MESSAGE = "Hello! I'm Kavi, your Kavithedal assistant. How can I help you discover your next great read today?"
