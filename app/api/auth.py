import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.crud import user as user_crud
from app.schemas.auth import LoginRequest, RegisterRequest, Token
from app.utils.security import authenticate_user, create_access_token, get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ===== REGISTER ENDPOINT =====

@router.post("/register", status_code=201)
def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a student or alumni account"""
    if user_crud.get_user_by_email(db, user_data.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        new_user = user_crud.create_user(
            db,
            name=user_data.name.strip(),
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=user_data.role.value,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Registration failed for %s", user_data.email)
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info("User %s registered as %s", new_user.id, new_user.role)
    return {"message": "Registration successful", "id": new_user.id}


# ===== LOGIN ENDPOINT =====

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return access token"""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    access_token = create_access_token(data={"sub": user.email, "role": user.role})

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role
    }
