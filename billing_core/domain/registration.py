"""Registration Domain Entity

One metered unit of usage (a form submission) counted against an
organization's registration limit.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from billing_core.domain.base import BaseModel, BigIntPK, UTCDateTime


class Registration(BaseModel, table=True):
    __tablename__ = "registrations"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
    )

    organization_id: str = Field(
        sa_column=Column(String(64), nullable=False, index=True),
        description="Organization the registration counts against"
    )

    qr_code_set_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="Form / QR code set the submission came from"
    )

    registered_at: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        default_factory=datetime.utcnow,
        description="Submission timestamp"
    )
