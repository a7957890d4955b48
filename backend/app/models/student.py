"""
Student model - the student records managed by the registry.

Maps onto the ``alunos`` table. Attribute names are English while the
column names follow the table's own naming (nome_completo, matricula,
curso, data_criacao, user_id).
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base

FULL_NAME_MAX_LENGTH = 100
REGISTRATION_NUMBER_MAX_LENGTH = 20
EMAIL_MAX_LENGTH = 255
COURSE_MAX_LENGTH = 100


class Student(Base):
    """
    SQLAlchemy model for the alunos table.

    ``id``, ``created_at`` and ``owner_id`` are assigned once at insert and
    never touched by updates. Registration number and email are unique
    across all records; the constraint names are what the store inspects
    to tell the two apart when an insert or update collides.
    """
    __tablename__ = "alunos"
    __table_args__ = (
        UniqueConstraint("matricula", name="alunos_matricula_key"),
        UniqueConstraint("email", name="alunos_email_key"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique record identifier")
    full_name = Column("nome_completo", String(FULL_NAME_MAX_LENGTH), nullable=False,
                       doc="Student's full name")
    registration_number = Column("matricula", String(REGISTRATION_NUMBER_MAX_LENGTH), nullable=False,
                                 doc="Registration number, unique across all records")
    email = Column("email", String(EMAIL_MAX_LENGTH), nullable=False,
                   doc="Student email, unique across all records")
    course = Column("curso", String(COURSE_MAX_LENGTH), nullable=False,
                    doc="Course the student is enrolled in")
    created_at = Column("data_criacao", DateTime, nullable=False,
                        default=lambda: datetime.now(timezone.utc), index=True,
                        doc="When the record was created; default sort key")
    owner_id = Column("user_id", String(36), ForeignKey("users.id"), nullable=True,
                      doc="User who created the record")

    owner = relationship("User", back_populates="students")

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.full_name}', matricula='{self.registration_number}')>"
