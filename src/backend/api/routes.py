"""FastAPI routes for the Backend domain.

Thin adapters that translate HTTP requests into domain commands.
No business logic, only schema to command to response translation.
"""

import json

from fastapi import APIRouter, HTTPException
from protean.utils.globals import current_domain

from backend.account.account import Account
from backend.account.authentication import SignIn, SignOut, check_password, resolve_token
from backend.account.profile import ChangePassword, UpdateProfile
from backend.account.registration import RegisterAccount
from backend.api.schemas import (
    ChangePasswordRequest,
    CreateOrderRequest,
    OrderResponse,
    RegisterUserRequest,
    SessionResponse,
    SignInRequest,
    SignInResponse,
    StatusResponse,
    UpdateOrderStatusRequest,
    UpdateUserRequest,
    UserResponse,
    VerifyPasswordRequest,
)
from backend.errors import AuthenticationFailed
from backend.order.order import Order
from backend.order.placement import PlaceOrder
from backend.order.status import UpdateOrderStatus

user_router = APIRouter(prefix="/users", tags=["users"])
session_router = APIRouter(prefix="/sessions", tags=["sessions"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _user_response(account_id) -> UserResponse:
    account = current_domain.repository_for(Account).get(account_id)
    return UserResponse(**account.profile_dict())


def _order_response(order_id) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(**order.to_record())


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@user_router.post("", status_code=201, response_model=SignInResponse)
async def register_user(body: RegisterUserRequest) -> SignInResponse:
    """Register an account and sign it in, like a hosted auth sign-up."""
    account_id = current_domain.process(
        RegisterAccount(
            email=body.email,
            password=body.password,
            full_name=body.full_name,
            phone=body.phone,
            address=body.address,
        ),
        asynchronous=False,
    )
    token = current_domain.process(SignIn(email=body.email, password=body.password), asynchronous=False)
    return SignInResponse(access_token=token, user=_user_response(account_id))


@user_router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str) -> UserResponse:
    return _user_response(user_id)


@user_router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, body: UpdateUserRequest) -> UserResponse:
    current_domain.process(
        UpdateProfile(
            account_id=user_id,
            full_name=body.full_name,
            email=body.email,
            phone=body.phone,
            address=body.address,
        ),
        asynchronous=False,
    )
    return _user_response(user_id)


@user_router.put("/{user_id}/password", response_model=UserResponse)
async def change_password(user_id: str, body: ChangePasswordRequest) -> UserResponse:
    current_domain.process(
        ChangePassword(account_id=user_id, new_password=body.new_password),
        asynchronous=False,
    )
    return _user_response(user_id)


@user_router.post("/{user_id}/password/verify", response_model=StatusResponse)
async def verify_password(user_id: str, body: VerifyPasswordRequest) -> StatusResponse:
    """Check a password without signing in."""
    if not check_password(user_id, body.password):
        raise AuthenticationFailed("Current password is incorrect")
    return StatusResponse()


@user_router.get("/{user_id}/orders", response_model=list[OrderResponse])
async def list_user_orders(user_id: str) -> list[OrderResponse]:
    """Orders of one user, most recently created first."""
    orders = current_domain.repository_for(Order).for_user(user_id)
    return [OrderResponse(**order.to_record()) for order in orders]


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------
@session_router.post("", status_code=201, response_model=SignInResponse)
async def sign_in(body: SignInRequest) -> SignInResponse:
    token = current_domain.process(SignIn(email=body.email, password=body.password), asynchronous=False)
    return SignInResponse(access_token=token, user=_user_response(resolve_token(token).account_id))


@session_router.get("/{token}", response_model=SessionResponse)
async def get_session(token: str) -> SessionResponse:
    access_token = resolve_token(token)
    if access_token is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return SessionResponse(access_token=str(access_token.id), user_id=str(access_token.account_id))


@session_router.delete("/{token}", response_model=StatusResponse)
async def sign_out(token: str) -> StatusResponse:
    current_domain.process(SignOut(token=token), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    order_id = current_domain.process(
        PlaceOrder(
            user_id=body.user_id,
            items=json.dumps([item.model_dump() for item in body.items]),
            total_price=body.total_price,
            payment_method=body.payment_method,
            sender_account=body.sender_account,
            address=body.address,
            status=body.status,
        ),
        asynchronous=False,
    )
    return _order_response(order_id)


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return _order_response(order_id)
