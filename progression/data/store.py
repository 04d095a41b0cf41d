"""
Persistence layer.

Only audit data and the denormalized student progress are stored locally;
students, projects and groups come from the progression API.

Tables:
- audits:        one row per (promo_id, project_name, group_id), enforced by
                 a unique constraint
- audit_results: one row per (audit, student), deleted with their audit
- students:      login, promotion, dropout flag and the fields overwritten
                 by every resync pass
- updates:       last resync time per event id ("all" for a full run)
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker

from ..config import DATABASE_URL
from ..models import AuditHistory, AuditInput, Priority, Track

logger = logging.getLogger(__name__)


class AuditAlreadyExistsError(Exception):
    """An audit already exists for this promotion, project and group."""


class Base(DeclarativeBase):
    pass


class Audit(Base):
    __tablename__ = "audits"
    __table_args__ = (
        UniqueConstraint("promo_id", "project_name", "group_id", name="uq_audit_group"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Keys into the progression API data (no FK, external data)
    promo_id: Mapped[str] = mapped_column(String(50), index=True)
    track: Mapped[str] = mapped_column(String(20))
    project_name: Mapped[str] = mapped_column(String(100))
    group_id: Mapped[str] = mapped_column(String(100), index=True)

    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    warnings: Mapped[list] = mapped_column(JSON, default=list)

    priority: Mapped[str] = mapped_column(String(20), default=Priority.NORMAL.value)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    validated_count: Mapped[int] = mapped_column(Integer, default=0)
    total_members: Mapped[int] = mapped_column(Integer, default=0)

    auditor_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    auditor_name: Mapped[str] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    results: Mapped[List["AuditResult"]] = relationship(
        "AuditResult",
        back_populates="audit",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AuditResult.id",
    )

    @property
    def key(self) -> tuple:
        return (self.promo_id, self.project_name, self.group_id)


class AuditResult(Base):
    __tablename__ = "audit_results"
    __table_args__ = (
        UniqueConstraint("audit_id", "student_login", name="uq_audit_result_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    audit_id: Mapped[int] = mapped_column(ForeignKey("audits.id", ondelete="CASCADE"), index=True)
    student_login: Mapped[str] = mapped_column(String(100), index=True)

    validated: Mapped[bool] = mapped_column(Boolean, default=False)
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    warnings: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    audit: Mapped["Audit"] = relationship("Audit", back_populates="results")


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    login: Mapped[str] = mapped_column(String(100), unique=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    promo_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    is_dropout: Mapped[bool] = mapped_column(Boolean, default=False)

    # Overwritten by every resync
    actual_project_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    progress_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    delay_level: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    golang_project: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    golang_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    golang_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    javascript_project: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    javascript_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    javascript_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    rust_project: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    rust_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    rust_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    java_project: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    java_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    java_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class UpdateLog(Base):
    __tablename__ = "updates"

    event_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    last_update: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class Database:
    """
    Engine and session factory.

    Usage:
        db = Database("sqlite://")   # in-memory
        db.create_all()
        audits = AuditStore(db)
    """

    def __init__(self, url: str = DATABASE_URL, echo: bool = False):
        self.engine = create_engine(url, echo=echo)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_all(self):
        Base.metadata.create_all(self.engine)

    def drop_all(self):
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def session(self):
        """Transactional scope: commit on success, rollback on any error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def _track_value(track) -> str:
    return track.value if isinstance(track, Track) else str(track)


class AuditStore:
    """
    Audit and audit result persistence.

    UNIQUENESS:
    -----------
    Two concurrent imports may both see "no audit yet" for the same group.
    The unique constraint makes the second insert fail; `create_audit`
    reports it as AuditAlreadyExistsError and `create_if_absent` as
    "not created", so callers never end up with duplicates.
    """

    def __init__(self, database: Database):
        self.db = database

    # ----------------------------------------------------------------- reads

    def get_audit(self, audit_id: int) -> Optional[Audit]:
        with self.db.session() as session:
            return session.get(Audit, audit_id)

    def get_audit_by_group(self, promo_id: str, project_name: str,
                           group_id: str) -> Optional[Audit]:
        with self.db.session() as session:
            stmt = select(Audit).where(
                Audit.promo_id == str(promo_id),
                Audit.project_name == project_name,
                Audit.group_id == str(group_id),
            )
            return session.scalars(stmt).first()

    def list_by_promo_and_track(self, promo_id: str, track) -> list:
        """Audits of a promotion and track, most recent first."""
        with self.db.session() as session:
            stmt = (
                select(Audit)
                .where(Audit.promo_id == str(promo_id), Audit.track == _track_value(track))
                .order_by(Audit.created_at.desc(), Audit.id.desc())
            )
            return list(session.scalars(stmt).all())

    def list_by_promo(self, promo_id: str) -> list:
        with self.db.session() as session:
            stmt = select(Audit).where(Audit.promo_id == str(promo_id)).order_by(Audit.id)
            return list(session.scalars(stmt).all())

    def recent_audits(self, limit: int = 10) -> list:
        with self.db.session() as session:
            stmt = select(Audit).order_by(Audit.created_at.desc(), Audit.id.desc()).limit(limit)
            return list(session.scalars(stmt).all())

    def audited_group_keys(self, promo_id: Optional[str] = None) -> set:
        """Set of (promo_id, project_name, group_id) that already have an audit."""
        with self.db.session() as session:
            stmt = select(Audit.promo_id, Audit.project_name, Audit.group_id)
            if promo_id is not None:
                stmt = stmt.where(Audit.promo_id == str(promo_id))
            return {tuple(row) for row in session.execute(stmt).all()}

    def student_audit_history(self, promo_id: str) -> dict:
        """
        Audit history of every student audited in a promotion.

        Returns:
            {lowercased login: AuditHistory}
        """
        with self.db.session() as session:
            stmt = (
                select(AuditResult.student_login, AuditResult.validated,
                       AuditResult.created_at, Audit.track)
                .join(Audit, AuditResult.audit_id == Audit.id)
                .where(Audit.promo_id == str(promo_id))
            )
            rows = session.execute(stmt).all()

        history = {}
        for login, validated, created_at, track in rows:
            entry = history.setdefault(login.lower(), AuditHistory())
            entry.audit_count += 1
            if validated:
                entry.validated_count += 1
            entry.tracks.add(track)
            if entry.last_audit_date is None or (created_at and created_at > entry.last_audit_date):
                entry.last_audit_date = created_at
        return history

    def stats_for_promo(self, promo_id: str) -> list:
        """
        Audit counts of a promotion grouped by track, then by project.

        Returns:
            [{"track": "Golang", "total_audits": 4, "total_students_audited": 11,
              "projects": [{"project_name": "Lem-in", "audit_count": 2,
                            "group_ids": ["12", "15"]}, ...]}, ...]
        """
        stats = {}
        for audit in self.list_by_promo(promo_id):
            track_stats = stats.setdefault(audit.track, {
                "promo_id": str(promo_id),
                "track": audit.track,
                "total_audits": 0,
                "total_students_audited": 0,
                "projects": [],
            })
            track_stats["total_audits"] += 1
            track_stats["total_students_audited"] += len(audit.results)

            project = next(
                (p for p in track_stats["projects"] if p["project_name"] == audit.project_name),
                None,
            )
            if project is None:
                project = {"project_name": audit.project_name, "audit_count": 0, "group_ids": []}
                track_stats["projects"].append(project)
            project["audit_count"] += 1
            project["group_ids"].append(audit.group_id)
        return list(stats.values())

    # ---------------------------------------------------------------- writes

    def _build_audit(self, data: AuditInput) -> Audit:
        created = data.created_at or datetime.now()
        audit = Audit(
            promo_id=str(data.promo_id),
            track=_track_value(data.track),
            project_name=data.project_name,
            group_id=str(data.group_id),
            summary=data.summary,
            warnings=list(data.warnings or []),
            auditor_id=data.auditor_id,
            auditor_name=data.auditor_name,
            validated_count=sum(1 for r in data.results if r.validated),
            total_members=len(data.results),
            created_at=created,
            updated_at=created,
        )
        audit.results = [
            AuditResult(
                student_login=r.student_login,
                validated=r.validated,
                feedback=r.feedback,
                warnings=list(r.warnings or []),
                created_at=created,
            )
            for r in data.results
        ]
        return audit

    def create_audit(self, data: AuditInput) -> Audit:
        """
        Insert an audit and its results in one transaction.

        Raises:
            AuditAlreadyExistsError: if the group already has an audit
        """
        try:
            with self.db.session() as session:
                audit = self._build_audit(data)
                session.add(audit)
                session.flush()
        except IntegrityError as e:
            raise AuditAlreadyExistsError(
                f"Audit already exists for {data.promo_id}/{data.project_name}/{data.group_id}"
            ) from e
        logger.info("Created audit %s for %s/%s/%s",
                    audit.id, audit.promo_id, audit.project_name, audit.group_id)
        return audit

    def create_if_absent(self, data: AuditInput) -> tuple:
        """
        Insert unless the group already has an audit.

        Returns:
            (Audit, True) when inserted, (existing Audit, False) otherwise
        """
        existing = self.get_audit_by_group(data.promo_id, data.project_name, data.group_id)
        if existing is not None:
            return existing, False
        try:
            return self.create_audit(data), True
        except AuditAlreadyExistsError:
            # Lost the race against another writer
            return self.get_audit_by_group(data.promo_id, data.project_name, data.group_id), False

    def update_audit(self, audit_id: int, summary: Optional[str] = None,
                     warnings: Optional[list] = None,
                     results: Optional[list] = None) -> Optional[Audit]:
        """
        Update an audit in place. Given results replace the previous ones.

        Returns:
            The updated Audit, or None if it does not exist
        """
        with self.db.session() as session:
            audit = session.get(Audit, audit_id)
            if audit is None:
                return None
            if summary is not None:
                audit.summary = summary
            if warnings is not None:
                audit.warnings = list(warnings)
            if results is not None:
                audit.results.clear()
                session.flush()
                audit.results.extend(
                    AuditResult(
                        student_login=r.student_login,
                        validated=r.validated,
                        feedback=r.feedback,
                        warnings=list(r.warnings or []),
                    )
                    for r in results
                )
                audit.validated_count = sum(1 for r in results if r.validated)
                audit.total_members = len(results)
            audit.updated_at = datetime.now()
            session.flush()
            return audit

    def set_priority(self, audit_id: int, priority: Priority) -> bool:
        with self.db.session() as session:
            audit = session.get(Audit, audit_id)
            if audit is None:
                return False
            audit.priority = priority.value
            return True

    def delete_audit(self, audit_id: int) -> bool:
        with self.db.session() as session:
            audit = session.get(Audit, audit_id)
            if audit is None:
                return False
            session.delete(audit)
            return True

    def clear_all(self) -> int:
        """Delete every audit and result. Returns the number of audits removed."""
        with self.db.session() as session:
            count = session.scalar(select(func.count(Audit.id))) or 0
            session.execute(delete(AuditResult))
            session.execute(delete(Audit))
        logger.info("Cleared %d audits", count)
        return count


class StudentStore:
    """Student records: dropout flags and denormalized progress."""

    def __init__(self, database: Database):
        self.db = database

    def get_student(self, login: str) -> Optional[Student]:
        with self.db.session() as session:
            return session.scalars(select(Student).where(Student.login == login)).first()

    def dropout_logins(self) -> set:
        """Lowercased logins of every student flagged as dropout."""
        with self.db.session() as session:
            rows = session.scalars(select(Student.login).where(Student.is_dropout.is_(True))).all()
        return {login.lower() for login in rows}

    def active_logins(self, promo_name: str) -> set:
        with self.db.session() as session:
            rows = session.scalars(
                select(Student.login).where(
                    Student.promo_name == promo_name,
                    Student.is_dropout.is_not(True),
                )
            ).all()
        return {login.lower() for login in rows}

    def set_dropout(self, login: str, is_dropout: bool = True) -> bool:
        with self.db.session() as session:
            student = session.scalars(select(Student).where(Student.login == login)).first()
            if student is None:
                return False
            student.is_dropout = is_dropout
            return True

    def upsert_progress(self, login: str, promo_name: str, progress,
                        first_name: Optional[str] = None,
                        last_name: Optional[str] = None) -> Student:
        """
        Overwrite the progress fields of a student, creating it if needed.

        Args:
            progress: StudentProgress from the resync engine
        """
        with self.db.session() as session:
            student = session.scalars(select(Student).where(Student.login == login)).first()
            if student is None:
                student = Student(login=login, is_dropout=False)
                session.add(student)
            if first_name:
                student.first_name = first_name
            if last_name:
                student.last_name = last_name
            student.promo_name = promo_name

            student.actual_project_name = progress.current_project or "N/A"
            student.progress_status = progress.current_status
            student.delay_level = progress.delay_level.value

            for track, state in progress.states.items():
                prefix = track.value.lower()
                setattr(student, f"{prefix}_project", state.project_name)
                setattr(student, f"{prefix}_status", state.status)
                setattr(student, f"{prefix}_completed", bool(progress.completed.get(track, False)))
            student.updated_at = datetime.now()
            session.flush()
            return student

    def delay_distribution(self, promo_name: Optional[str] = None) -> dict:
        """Number of students per stored delay level."""
        with self.db.session() as session:
            stmt = select(Student.delay_level, func.count(Student.id)).group_by(Student.delay_level)
            if promo_name is not None:
                stmt = stmt.where(Student.promo_name == promo_name)
            return {level: count for level, count in session.execute(stmt).all() if level}

    def record_update(self, event_id: str, when: Optional[datetime] = None):
        with self.db.session() as session:
            log = session.get(UpdateLog, event_id)
            if log is None:
                session.add(UpdateLog(event_id=event_id, last_update=when or datetime.now()))
            else:
                log.last_update = when or datetime.now()

    def last_update(self, event_id: str) -> Optional[datetime]:
        with self.db.session() as session:
            log = session.get(UpdateLog, event_id)
            return log.last_update if log else None
