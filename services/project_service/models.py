from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, Boolean, JSON, TypeDecorator
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import enum

Base = declarative_base()


class EnumValue(TypeDecorator):
    """Stores the enum value ("InBidding") rather than the member name ("IN_BIDDING")."""
    impl = String
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, self.enum_class):
            return value.value
        # Plain strings must still be a known value
        return self.enum_class(value).value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return self.enum_class(value)


class ProjectStatus(str, enum.Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    IN_BIDDING = "InBidding"
    BID_SELECTED = "BidSelected"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    AWARDED = "Awarded"


# Statuses in which merchants may submit bids
OPEN_STATUSES = (ProjectStatus.PUBLISHED, ProjectStatus.IN_BIDDING)

# Legal targets of an admin approval
APPROVAL_TARGETS = (ProjectStatus.PUBLISHED, ProjectStatus.IN_BIDDING)

# Source states each transition accepts; anything else needs the admin override
APPROVABLE_STATUSES = (ProjectStatus.DRAFT,)
REJECTABLE_STATUSES = (
    ProjectStatus.DRAFT,
    ProjectStatus.PUBLISHED,
    ProjectStatus.IN_BIDDING,
    ProjectStatus.CANCELLED,
)
SELECTABLE_STATUSES = (ProjectStatus.PUBLISHED, ProjectStatus.IN_BIDDING, ProjectStatus.AWARDED)


class BidStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, nullable=False, index=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    category_id = Column(String, nullable=True)
    status = Column(EnumValue(ProjectStatus, length=50), nullable=False, default=ProjectStatus.DRAFT, index=True)
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    bids = relationship("Bid", back_populates="project", cascade="all, delete-orphan")


class Bid(Base):
    __tablename__ = "bids"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    merchant_id = Column(Integer, nullable=False, index=True)
    price = Column(Float, nullable=False)
    days = Column(Integer, nullable=False)
    message = Column(Text, nullable=True)
    status = Column(EnumValue(BidStatus, length=20), nullable=False, default=BidStatus.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    project = relationship("Project", back_populates="bids")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    role = Column(String, nullable=True, index=True)  # customer, merchant, technician, admin
    type = Column(String, nullable=False)  # 'project.approved', 'bid.selected', ...
    title = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
