"""
One-time sign-up codes.

Codes are four digits, delivered out of band, and stored one row per send.
They never expire by time; a code stops working once it has been redeemed.
"""
import logging
import secrets

from sqlalchemy.orm import Session

from .models import OTPCode

logger = logging.getLogger(__name__)

OTP_DIGITS = 4


def generate_otp() -> str:
    return str(secrets.randbelow(10 ** OTP_DIGITS)).zfill(OTP_DIGITS)


def issue_otp(db: Session, email: str) -> OTPCode:
    """Persist a fresh code for ``email``. Earlier codes stay valid."""
    otp = OTPCode(email=email, code=generate_otp(), is_used=False)
    db.add(otp)
    db.commit()
    db.refresh(otp)
    logger.info("OTP issued: email=%s otp_id=%s", email, otp.id)
    return otp


def redeem_otp(db: Session, email: str, code: str) -> bool:
    """
    Consume an unused code for ``email`` in one conditional UPDATE.

    Two callers racing on the same code cannot both succeed: the second
    UPDATE matches no rows once the first has flipped ``is_used``.
    Does not commit; the caller owns the transaction.
    """
    updated = (
        db.query(OTPCode)
        .filter(
            OTPCode.email == email,
            OTPCode.code == code,
            OTPCode.is_used.is_(False),
        )
        .update({OTPCode.is_used: True}, synchronize_session=False)
    )
    return updated > 0


def mark_email_codes_used(db: Session, email: str) -> int:
    """Invalidate every outstanding code for ``email``. Does not commit."""
    return (
        db.query(OTPCode)
        .filter(OTPCode.email == email, OTPCode.is_used.is_(False))
        .update({OTPCode.is_used: True}, synchronize_session=False)
    )
