from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Date, Time, Text, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coachline.database import Base

# ================================
# Passenger Categories
# ================================
class PassengerType(Base):
    __tablename__ = "passenger_types"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    discount_percentage = Column(Numeric(5, 2), default=0.00)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

# ================================
# Operators / Stations (reference data)
# ================================
class Operator(Base):
    __tablename__ = "operators"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    status = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    routes = relationship("Route", back_populates="operator")

class Station(Base):
    __tablename__ = "stations"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    city = Column(String(255), index=True)
    lat = Column(Numeric(10, 6))
    long = Column(Numeric(10, 6))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    schedule_stations = relationship("ScheduleStation", back_populates="station")

# ================================
# Routes & Amenities
# ================================
class Route(Base):
    __tablename__ = "routes"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    origin = Column(String(255), nullable=False, index=True)
    destination = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    return_ticket_price = Column(Numeric(10, 2), nullable=False)
    operator_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("operators.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    operator = relationship("Operator", back_populates="routes")
    amenity = relationship("Amenity", back_populates="route", uselist=False, cascade="all, delete-orphan")
    schedules = relationship("Schedule", back_populates="route", cascade="all, delete-orphan")

class Amenity(Base):
    __tablename__ = "amenities"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    route_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("routes.id"), unique=True, nullable=False)
    number_of_seats = Column(Integer, default=0)
    luggage_capacity = Column(Integer, default=0)
    has_wifi = Column(Boolean, default=False)
    has_air_conditioning = Column(Boolean, default=False)
    has_power_outlets = Column(Boolean, default=False)
    has_restroom = Column(Boolean, default=False)

    # Relationships
    route = relationship("Route", back_populates="amenity")

# ================================
# Schedules
# ================================
class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("valid_from <= valid_to", name="ck_schedules_valid_window"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    route_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("routes.id"), nullable=False, index=True)
    valid_from = Column(Date, nullable=False)
    valid_to = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    route = relationship("Route", back_populates="schedules")
    exception_days = relationship("ExceptionDay", back_populates="schedule", cascade="all, delete-orphan")
    schedule_times = relationship("ScheduleTime", back_populates="schedule", cascade="all, delete-orphan")

class ExceptionDay(Base):
    __tablename__ = "exception_days"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    schedule_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("schedules.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    reason = Column(Text)

    # Relationships
    schedule = relationship("Schedule", back_populates="exception_days")

class ScheduleTime(Base):
    __tablename__ = "schedule_times"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    schedule_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("schedules.id"), nullable=False, index=True)
    departure_time = Column(Time, nullable=False)
    arrival_time = Column(Time, nullable=False)
    is_weekday_active = Column(Boolean, default=True)
    is_saturday_active = Column(Boolean, default=True)
    is_sunday_active = Column(Boolean, default=True)
    is_holiday_active = Column(Boolean, default=True)

    # Relationships
    schedule = relationship("Schedule", back_populates="schedule_times")
    schedule_stations = relationship(
        "ScheduleStation",
        back_populates="schedule_time",
        cascade="all, delete-orphan",
        order_by="ScheduleStation.arrival_time"
    )

class ScheduleStation(Base):
    __tablename__ = "schedule_stations"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    schedule_time_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("schedule_times.id"), nullable=False, index=True)
    station_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("stations.id"), nullable=False, index=True)
    arrival_time = Column(Time, nullable=False)
    distance_from_previous_stop = Column(Numeric(8, 2), default=0)

    # Relationships
    schedule_time = relationship("ScheduleTime", back_populates="schedule_stations")
    station = relationship("Station", back_populates="schedule_stations")

# ================================
# Holiday Calendar
# ================================
class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    date = Column(Date, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
