from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ministry.db.base import Base
from ministry.db.session import SessionLocal, engine
from ministry.models import (
    AlumniSmallGroup,
    Attendance,
    Contribution,
    Member,
    PermanentMinistryEvent,
    Region,
    SmallGroup,
    University,
    User,
    UserRole,
)


def init_db(seed: bool = True) -> None:
    """
    Create tables + seed demo data.

    The seed is small and deterministic (fixed ids) so every scope kind can be
    tried with the dummy auth provider: `Authorization: Bearer <user id>`.
    """

    Base.metadata.create_all(bind=engine)
    if not seed:
        return

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed_demo_data(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Region.id).limit(1)).first() is not None


def seed_demo_data(db: Session) -> None:
    """
    Seed the demo tree:

        Central (region 1)
            Riverside University (1) -> Riverside Fellowship (small group 1)
            Hillview University (2)  -> Hillview Fellowship (small group 2)
            Central Alumni (alumni group 1)
        Coast (region 2)
            Harbour University (3)   -> Harbour Fellowship (small group 3)
            Coast Alumni (alumni group 2)

    Users 1-6 hold one scope each, user 7 has a region scope with no region id,
    user 8 has no scope at all and user 9 is inactive.
    """

    db.add_all([Region(id=1, name="Central"), Region(id=2, name="Coast")])
    db.flush()

    db.add_all(
        [
            University(id=1, name="Riverside University", region_id=1),
            University(id=2, name="Hillview University", region_id=1),
            University(id=3, name="Harbour University", region_id=2),
            AlumniSmallGroup(id=1, name="Central Alumni", region_id=1),
            AlumniSmallGroup(id=2, name="Coast Alumni", region_id=2),
        ]
    )
    db.flush()

    db.add_all(
        [
            SmallGroup(id=1, name="Riverside Fellowship", university_id=1, region_id=1),
            SmallGroup(id=2, name="Hillview Fellowship", university_id=2, region_id=1),
            SmallGroup(id=3, name="Harbour Fellowship", university_id=3, region_id=2),
        ]
    )
    db.flush()

    users = [
        User(id=1, name="Sam Super", email="super@example.org"),
        User(id=2, name="Nia National", email="national@example.org"),
        User(id=3, name="Rita Region", email="region.central@example.org"),
        User(id=4, name="Uma University", email="uni.riverside@example.org"),
        User(id=5, name="Gabe Group", email="sg.riverside@example.org"),
        User(id=6, name="Alex Alumni", email="alumni.central@example.org"),
        User(id=7, name="Mo Misconfigured", email="misconfigured@example.org"),
        User(id=8, name="Nora Norole", email="norole@example.org"),
        User(id=9, name="Ian Inactive", email="inactive@example.org", is_active=False),
    ]
    db.add_all(users)
    db.flush()

    assigned = datetime(2025, 1, 1)
    db.add_all(
        [
            UserRole(user_id=1, scope="superadmin", assigned_at=assigned),
            UserRole(user_id=2, scope="national", assigned_at=assigned),
            UserRole(user_id=3, scope="region", region_id=1, assigned_at=assigned),
            UserRole(user_id=4, scope="university", university_id=1, assigned_at=assigned),
            UserRole(user_id=5, scope="smallgroup", small_group_id=1, assigned_at=assigned),
            UserRole(user_id=6, scope="alumnismallgroup", alumni_group_id=1, assigned_at=assigned),
            UserRole(user_id=7, scope="region", assigned_at=assigned),
            UserRole(user_id=9, scope="superadmin", assigned_at=assigned),
        ]
    )

    db.add_all(
        [
            Member(
                id=1,
                first_name="Grace",
                second_name="Otieno",
                gender="female",
                email="grace@example.org",
                type="student",
                region_id=1,
                university_id=1,
                small_group_id=1,
                faculty="Engineering",
            ),
            Member(
                id=2,
                first_name="Peter",
                second_name="Kamau",
                gender="male",
                email="peter@example.org",
                type="student",
                region_id=1,
                university_id=2,
                small_group_id=2,
            ),
            Member(
                id=3,
                first_name="Amina",
                second_name="Hassan",
                gender="female",
                email="amina@example.org",
                type="student",
                region_id=2,
                university_id=3,
                small_group_id=3,
            ),
            Member(
                id=4,
                first_name="John",
                second_name="Mwangi",
                gender="male",
                email="john@example.org",
                type="alumni",
                region_id=1,
                alumni_group_id=1,
                graduation_date=date(2019, 12, 1),
            ),
            Member(
                id=5,
                first_name="Faith",
                second_name="Njeri",
                gender="female",
                email="faith@example.org",
                type="staff",
                region_id=1,
                university_id=1,
            ),
        ]
    )
    db.flush()

    db.add_all(
        [
            PermanentMinistryEvent(id=1, name="National Conference", type="other"),
            PermanentMinistryEvent(id=2, name="Central Prayer Night", type="evangelism", region_id=1),
            PermanentMinistryEvent(
                id=3,
                name="Riverside Bible Study",
                type="bible_study",
                region_id=1,
                university_id=1,
                small_group_id=1,
            ),
            PermanentMinistryEvent(id=4, name="Coast Retreat", type="other", region_id=2),
        ]
    )
    db.flush()

    db.add_all(
        [
            Attendance(member_id=1, event_id=3, status="present"),
            Attendance(member_id=2, event_id=2, status="absent"),
            Attendance(member_id=3, event_id=4, status="present"),
            Contribution(member_id=1, amount=500, method="mobile_money", status="completed", transaction_id="TX-1001"),
            Contribution(member_id=3, amount=1200, method="bank_transfer", status="completed", transaction_id="TX-1002"),
            Contribution(member_id=None, amount=250, method="card", status="pending"),
        ]
    )

    db.commit()
