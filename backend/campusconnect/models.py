from sqlalchemy import Column, Integer, String, Date, DateTime, Float, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from campusconnect.database import Base

# SQLAlchemy Models
class Student(Base):
    __tablename__ = "students_list"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False)
    class_name = Column("class", String(50), nullable=False, index=True)
    roll_no = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Fee rows are removed explicitly before the student, never by the ORM
    fees = relationship("FeeRecord", back_populates="student", passive_deletes="all")

    def __repr__(self):
        return f"<Student(id={self.id}, full_name='{self.full_name}', class='{self.class_name}', roll_no={self.roll_no})>"

class AttendanceEntry(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    student = Column(String(200), nullable=False)
    roll_no = Column(Integer, nullable=True)
    class_name = Column("class", String(50), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    subject = Column(String(100), nullable=False)
    status = Column(String(20), nullable=True)  # "present", "absent" or NULL when unset
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class ResultEntry(Base):
    __tablename__ = "results_matrix"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False, index=True)
    class_name = Column("class", String(50), nullable=False, index=True)
    subject = Column(String(100), nullable=False)
    marks = Column(String(20), nullable=True)
    date = Column(Date, nullable=False, index=True)
    exam_type = Column(String(100), nullable=True)
    file_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("full_name", "subject", "date", name="uq_results_name_subject_date"),
    )

class TimetableEntry(Base):
    __tablename__ = "timetable"

    id = Column(Integer, primary_key=True, index=True)
    class_name = Column("class", String(50), nullable=False, index=True)
    day = Column(String(20), nullable=False)
    period = Column(Integer, nullable=False)
    subject = Column(String(100), nullable=True, default="")
    time = Column(String(50), nullable=True)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

class Notice(Base):
    __tablename__ = "noticeboard"

    id = Column(Integer, primary_key=True, index=True)
    class_name = Column("class", String(50), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    notice = Column(Text, nullable=False, default="")
    file_url = Column(String(1000), nullable=True)
    file_type = Column(String(20), nullable=True)  # "image" or "pdf"
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class FeeRecord(Base):
    __tablename__ = "fees"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students_list.id"), nullable=False, index=True)
    class_name = Column("class", String(50), nullable=False, index=True)
    year = Column(String(20), nullable=False)
    total = Column(Float, nullable=False, default=0)
    paid = Column(Float, nullable=False, default=0)
    due = Column(Float, nullable=False, default=0)
    file_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    student = relationship("Student", back_populates="fees")

    __table_args__ = (
        UniqueConstraint("student_id", "year", name="uq_fees_student_year"),
    )
