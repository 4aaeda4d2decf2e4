from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime
import uuid
import enum

from jobboard.database import Base
from jobboard.database_types import GUID


class ListingVariant(str, enum.Enum):
    """Which of the two ad kinds a listing is."""
    JOB_SEEKER = "job_seeker"  # "looking for work"
    EMPLOYER = "employer"  # "looking for a worker"


class WorkMode(str, enum.Enum):
    ONLINE = "online"
    PHYSICAL = "physical"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    ANY = "any"  # employer preference only


class SeekerExperience(str, enum.Enum):
    NONE = "none"
    ONE_YEAR = "1"
    TWO_YEARS = "2"
    THREE_YEARS = "3"
    FOUR_YEARS = "4"
    FIVE_PLUS_YEARS = "5+"


class EmployerExperience(str, enum.Enum):
    NONE = "none"
    ONE_YEAR = "1"
    TWO_YEARS = "2"
    THREE_YEARS = "3"
    FOUR_PLUS_YEARS = "4+"


class AgeRange(str, enum.Enum):
    YOUNG = "18-26"
    MIDDLE = "26-35"
    SENIOR = "35+"


# Columns holding record fields, in the order the page shows them
RECORD_FIELDS = (
    "variant",
    "user_id",
    "created_at",
    "approved",
    "hide_my_name",
    "full_name",
    "contact_number",
    "email",
    # Job seeker
    "skills",
    "work_mode",
    "job_title",
    "gender",
    "age",
    "experience",
    "region",
    # Employer
    "company",
    "worker_mode",
    "age_range",
    "required_skills",
)


class Listing(Base):
    __tablename__ = "job_ads"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    collection_path = Column(String, nullable=False, index=True)
    
    # Ownership & lifecycle
    variant = Column(String(20), nullable=False, index=True)  # job_seeker | employer
    user_id = Column(GUID, nullable=False, index=True)  # owning anonymous session
    created_at = Column(DateTime, nullable=True, index=True)  # server-assigned at write
    approved = Column(Boolean, default=False, nullable=False, index=True)  # moderation gate
    hide_my_name = Column(Boolean, default=False, nullable=False)
    
    # Common fields
    full_name = Column(String(255), nullable=True)
    contact_number = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    gender = Column(String(10), nullable=True)
    experience = Column(String(10), nullable=True)
    region = Column(String(255), nullable=True)
    
    # Job seeker fields
    skills = Column(Text, nullable=True)
    work_mode = Column(String(10), nullable=True)  # online | physical
    job_title = Column(String(255), nullable=True)
    age = Column(Integer, nullable=True)
    
    # Employer fields
    company = Column(String(255), nullable=True)
    worker_mode = Column(String(10), nullable=True)  # online | physical
    age_range = Column(String(10), nullable=True)
    required_skills = Column(Text, nullable=True)
    
    def to_record(self) -> dict:
        """Record fields as a plain dict, omitting unset optional fields."""
        record = {}
        for field in RECORD_FIELDS:
            value = getattr(self, field)
            if value is None and field != "created_at":
                continue
            if field == "user_id":
                value = str(value)
            record[field] = value
        return record
