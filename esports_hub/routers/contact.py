import logging
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlmodel import Session

from ..database import get_session
from ..models.contact import Contact
from ..services.auth import is_valid_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])


class ContactCreate(BaseModel):
    name: str
    email: str
    subject: str
    message: str


@router.post("/contact")
async def submit_contact(
    data: ContactCreate,
    db: Session = Depends(get_session)
):
    """Public contact form."""
    fields = {
        "name": data.name.strip(),
        "email": data.email.strip(),
        "subject": data.subject.strip(),
        "message": data.message.strip(),
    }
    missing = [field for field, value in fields.items() if not value]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required fields: {', '.join(missing)}"
        )

    if not is_valid_email(fields["email"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    contact = Contact(**fields)
    db.add(contact)
    db.commit()
    db.refresh(contact)

    logger.info(f"Contact {contact.id} submitted by {contact.email}")
    return contact
