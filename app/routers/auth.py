import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from app.db import dynamo
from app.models.user import UserCreate, UserInDB, UserLogin, UserPublic

router = APIRouter()
logger = logging.getLogger(__name__)


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Extract user_id from the Bearer token and make sure the user still exists"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Access denied. No token provided."
        )

    token = authorization.replace("Bearer ", "", 1)
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")

    if not dynamo.get_user_by_id(user_id):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token. User not found.")
    return user_id


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user: UserCreate):
    existing = dynamo.get_user_by_email(user.email)
    if existing:
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user_db = UserInDB(
        email=user.email,
        first_name=user.first_name,
        password_hash=get_password_hash(user.password),
    )

    success = dynamo.put_user(user_db.model_dump())
    if not success:
        raise HTTPException(status_code=500, detail="Error saving user")

    logger.info(f"Registered user {user_db.user_id}")
    return {
        "success": True,
        "message": "User registered successfully",
        "data": {
            "user": UserPublic.from_item(user_db.model_dump()).to_json(),
            "token": create_access_token(data={"sub": user_db.user_id}),
        },
    }


@router.post("/login")
def login(login_data: UserLogin):
    logger.info(f"Login attempt for email: {login_data.email}")
    user = dynamo.get_user_by_email(login_data.email)

    if not user or not verify_password(login_data.password, user["password_hash"]):
        logger.warning(f"Invalid credentials for email: {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    logger.info(f"Login successful for user: {user['user_id']}")
    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "user": UserPublic.from_item(user).to_json(),
            "token": create_access_token(data={"sub": user["user_id"]}),
        },
    }


@router.get("/me")
def get_current_user(user_id: str = Depends(get_current_user_id)):
    """Get current user profile"""
    user = dynamo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return {"success": True, "data": {"user": UserPublic.from_item(user).to_json()}}
