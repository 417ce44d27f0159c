"""Pydantic request/response schemas for the Backend API.

These are external contracts (anti-corruption layer), kept separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    image: str = ""
    description: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "sari@example.com",
                    "password": "rahasia123",
                    "full_name": "Sari Wulandari",
                    "phone": "081234567890",
                    "address": "Jl. Melati No. 5, Bandung",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)
    full_name: str = Field(..., max_length=150)
    phone: str | None = Field(None, max_length=30)
    address: str | None = None


class UpdateUserRequest(BaseModel):
    full_name: str | None = Field(None, max_length=150)
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=30)
    address: str | None = None


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(..., max_length=128)


class VerifyPasswordRequest(BaseModel):
    password: str = Field(..., max_length=128)


class SignInRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "a1b2c3",
                    "items": [{"id": "1", "name": "Mie Ayam Original", "price": 25000, "quantity": 2, "image": ""}],
                    "total_price": 50000,
                    "status": "processing",
                    "payment_method": "transfer",
                    "sender_account": "1234567890",
                    "address": "Jl. Melati No. 5, Bandung",
                }
            ]
        }
    }

    user_id: str
    items: list[OrderItemSchema] = Field(..., min_length=1)
    total_price: float = Field(ge=0)
    status: str | None = None
    payment_method: str
    sender_account: str | None = None
    address: str


class UpdateOrderStatusRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=50)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    phone: str | None = None
    address: str | None = None


class SessionResponse(BaseModel):
    access_token: str
    user_id: str


class SignInResponse(BaseModel):
    access_token: str
    user: UserResponse


class OrderResponse(BaseModel):
    id: str
    user_id: str
    items: list[OrderItemSchema]
    total_price: float
    status: str
    payment_method: str
    sender_account: str
    address: str
    created_at: str
    updated_at: str


class StatusResponse(BaseModel):
    status: str = "ok"
