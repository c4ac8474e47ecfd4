"""Canonical PlantUML inputs used for demos and tests."""
from __future__ import annotations

import logging
from typing import Dict, List

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE = "default"

SAMPLES: Dict[str, str] = {
    "default": """@startuml
actor "Customer" as Customer
participant "Web Application" as WebApp
participant "API Gateway" as Gateway
participant "Auth Service" as AuthService
database "User DB" as UserDB
participant "Order Service" as OrderService
database "Order DB" as OrderDB
participant "Payment Service" as PaymentService
participant "Notification Service" as NotificationService

Customer -> WebApp: login request
WebApp -> Gateway: call auth API
Gateway -> AuthService: verify user
AuthService -> UserDB: load user
UserDB --> AuthService: user record
AuthService --> Gateway: auth token
Gateway --> WebApp: login ok
WebApp --> Customer: show dashboard

Customer -> WebApp: place order
WebApp -> Gateway: create order API
Gateway -> OrderService: process order
OrderService -> OrderDB: store order
OrderDB --> OrderService: stored
OrderService -> PaymentService: request payment
PaymentService --> OrderService: payment done
OrderService -> NotificationService: order completed
NotificationService --> Customer: email/SMS
OrderService --> Gateway: order response
Gateway --> WebApp: success
WebApp --> Customer: order complete page
@enduml""",
    "simple": """@startuml
Alice -> Bob: Hello!
Bob --> Alice: Nice to meet you
Alice ->> Bob: send message
Bob ..> Alice: read receipt
@enduml""",
    "ecommerce": """@startuml
actor "Customer" as Customer
participant "Website" as Website
database "Product DB" as ProductDB
participant "Payment System" as Payment
participant "Shipping Service" as Shipping

Customer -> Website: search products
Website -> ProductDB: query products
ProductDB --> Website: product list
Website --> Customer: search results

Customer -> Website: add to cart
Customer -> Website: checkout
Website -> Payment: process payment
Payment --> Website: payment complete
Website -> Shipping: request shipment
Shipping --> Customer: shipment notice
@enduml""",
    "microservice": """@startuml
participant "Client" as Client
participant "API Gateway" as Gateway
participant "User Service" as UserService
participant "Order Service" as OrderService
participant "Inventory Service" as InventoryService
database "Redis Cache" as Cache

Client -> Gateway: API request
Gateway -> UserService: verify user
UserService --> Gateway: verified

Gateway -> OrderService: create order
OrderService -> InventoryService: check stock
InventoryService -> Cache: cache lookup
Cache --> InventoryService: cached data
InventoryService --> OrderService: stock confirmed
OrderService --> Gateway: order created
Gateway --> Client: response
@enduml""",
}


def sample_keys() -> List[str]:
    return list(SAMPLES)


def get_sample(key: str = DEFAULT_SAMPLE, fallback: str = DEFAULT_SAMPLE) -> str:
    """Return a sample by key; unknown keys fall back to ``fallback``, then to the default sample."""
    if key in SAMPLES:
        return SAMPLES[key]
    if fallback not in SAMPLES:
        fallback = DEFAULT_SAMPLE
    logger.warning("Unknown sample %r, using %r", key, fallback)
    return SAMPLES[fallback]
