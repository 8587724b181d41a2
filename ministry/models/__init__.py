# Import every model so Base.metadata knows all tables.
from ministry.models.activities import Attendance, PermanentMinistryEvent
from ministry.models.financial import Contribution
from ministry.models.org import AlumniSmallGroup, Region, SmallGroup, University
from ministry.models.people import Member, User, UserRole

__all__ = [
    "AlumniSmallGroup",
    "Attendance",
    "Contribution",
    "Member",
    "PermanentMinistryEvent",
    "Region",
    "SmallGroup",
    "University",
    "User",
    "UserRole",
]
