# storefront/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from sqlalchemy import func
from storefront.utils.hashing import get_password_hash, verify_password
from storefront.utils.tokenJWT import create_access_token, get_current_user
from storefront.utils.audit import write_log, client_ip
from storefront.models.users import User
from storefront.schemas import user as schemas
from storefront.schemas.cart import MessageOut
from storefront.database import get_db

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# Register a new member account
@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()

    # Check for existing user
    db_user = db.query(User).filter(func.lower(User.email) == normalized_email).first()
    if db_user:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    new_user = User(
        email=normalized_email,
        password_hash=get_password_hash(payload.password),
        fullname=payload.name,
        role="member",
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    write_log(db, user_id=new_user.id, action="REGISTER", resource="auth",
              ip=client_ip(request), meta={"email": new_user.email})
    return {"message": "User registered successfully"}


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(func.lower(User.email) == payload.email.strip().lower()).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": db_user.email, "role": db_user.role})

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              ip=client_ip(request), meta={"email": db_user.email})
    return {"access_token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
