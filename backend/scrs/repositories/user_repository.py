from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from scrs.models.user import User, UserRole
from datetime import datetime
from typing import Optional, List, Tuple

class UserRepository:
    def get_by_id(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    def get_by_username_or_email(self, db: Session, identifier: str) -> Optional[User]:
        return self.get_by_username(db, identifier) or self.get_by_email(db, identifier)

    def exists_by_username(self, db: Session, username: str) -> bool:
        return self.get_by_username(db, username) is not None

    def exists_by_email(self, db: Session, email: str) -> bool:
        return self.get_by_email(db, email) is not None

    def create(self, db: Session, user: User) -> User:
        db.add(user)
        db.flush()
        return user

    def delete(self, db: Session, user: User) -> None:
        db.delete(user)
        db.flush()

    def count(self, db: Session) -> int:
        return db.query(User).count()

    def count_active(self, db: Session) -> int:
        return db.query(User).filter(User.is_active.is_(True)).count()

    def get_all(self, db: Session, skip: int = 0, limit: int = 100) -> List[User]:
        return db.query(User).order_by(User.id).offset(skip).limit(limit).all()

    def get_by_role(self, db: Session, role: UserRole, active_only: bool = False) -> List[User]:
        query = db.query(User).filter(User.role == role)
        if active_only:
            query = query.filter(User.is_active.is_(True))
        return query.order_by(User.id).all()

    def get_by_department(self, db: Session, department_id: int, active_only: bool = False) -> List[User]:
        query = db.query(User).filter(User.department_id == department_id)
        if active_only:
            query = query.filter(User.is_active.is_(True))
        return query.order_by(User.id).all()

    def search(
        self,
        db: Session,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[User], int]:
        query = db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(or_(
                func.lower(User.username).like(pattern),
                func.lower(User.email).like(pattern),
                func.lower(User.first_name).like(pattern),
                func.lower(User.last_name).like(pattern),
            ))
        total = query.count()
        return query.order_by(User.id).offset(skip).limit(limit).all(), total

    def get_created_since(self, db: Session, since: datetime) -> List[User]:
        return db.query(User).filter(User.created_at >= since).all()
