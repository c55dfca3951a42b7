"""
Enumerations shared by stored records and extraction schemas.
Values are stored as-is; do not rename shipped values.
"""

from enum import Enum


class Provider(str, Enum):
    GREENHOUSE = "greenhouse"
    LEVER = "lever"


class Presence(str, Enum):
    ONSITE = "onsite"
    HYBRID = "hybrid"
    REMOTE = "remote"


class WorkTimeBasis(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"


class EngagementType(str, Enum):
    EMPLOYEE = "employee"
    CONTRACTOR = "contractor"
    INTERN = "intern"
    TEMPORARY = "temporary"


class SeniorityLevel(str, Enum):
    INTERN = "intern"
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    STAFF = "staff"
    PRINCIPAL = "principal"
    MANAGER = "manager"
    DIRECTOR = "director"
    EXECUTIVE = "executive"


class CompanySizeBand(str, Enum):
    XS = "1-10"
    S = "11-50"
    M = "51-200"
    L = "201-500"
    XL = "501-1000"
    XXL = "1001-5000"
    XXXL = "5001-10000"
    ENTERPRISE = "10000+"


class CompanyStage(str, Enum):
    SEED = "seed"
    SERIES_A = "series_a"
    SERIES_B = "series_b"
    SERIES_C = "series_c"
    SERIES_D_PLUS = "series_d_plus"
    PUBLIC = "public"
    BOOTSTRAPPED = "bootstrapped"


class PayCadence(str, Enum):
    HOURLY = "hourly"
    SALARY = "salary"
    STIPEND = "stipend"


class EducationLevel(str, Enum):
    HIGH_SCHOOL = "high_school"
    ASSOCIATES = "associates"
    BACHELORS = "bachelors"
    MASTERS = "masters"
    PHD = "phd"
