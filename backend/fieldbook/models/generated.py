from sqlalchemy import Column, Float, ForeignKey, Index, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Venues(Base):
    __tablename__ = 'venues'

    name = Column(Text, nullable=False)
    city = Column(Text, nullable=False, server_default=text("''"))
    opening_time = Column(Text, nullable=False, server_default=text("'06:00'"))
    closing_time = Column(Text, nullable=False, server_default=text("'23:00'"))
    days_available = Column(Text, nullable=False, server_default=text("'[0, 1, 2, 3, 4, 5, 6]'"))  # JSON list, 0 = Sunday
    status = Column(Text, nullable=False, server_default=text("'open'"))
    approval_status = Column(Text, nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    address = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    fields = relationship('VenueFields', back_populates='venue', cascade='all, delete-orphan')
    time_slots = relationship('TimeSlots', back_populates='venue', passive_deletes=True)
    special_occasions = relationship('VenueSpecialOccasions', back_populates='venue', passive_deletes=True)
    bookings = relationship('Bookings', back_populates='venue')


class VenueFields(Base):
    __tablename__ = 'venue_fields'

    venue_id = Column(ForeignKey('venues.id', ondelete='CASCADE'), nullable=False)
    field_name = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'open'"))
    id = Column(Integer, primary_key=True)
    field_number = Column(Text)
    field_type = Column(Text, server_default=text("'futsal'"))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    venue = relationship('Venues', back_populates='fields')
    time_slots = relationship('TimeSlots', back_populates='field', passive_deletes=True)


class TimeSlots(Base):
    __tablename__ = 'time_slots'
    __table_args__ = (
        Index('ix_time_slots_lookup', 'venue_id', 'day_of_week', 'field_id'),
    )

    venue_id = Column(ForeignKey('venues.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    field_id = Column(ForeignKey('venue_fields.id', ondelete='CASCADE'))  # NULL = venue-level grid

    venue = relationship('Venues', back_populates='time_slots')
    field = relationship('VenueFields', back_populates='time_slots')


class VenueSpecialOccasions(Base):
    __tablename__ = 'venue_special_occasions'

    venue_id = Column(ForeignKey('venues.id', ondelete='CASCADE'), nullable=False)
    title = Column(Text, nullable=False)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)
    override_type = Column(Text, nullable=False)
    is_recurring = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    field_id = Column(ForeignKey('venue_fields.id', ondelete='CASCADE'))  # NULL = venue-wide
    description = Column(Text)
    custom_opening_time = Column(Text)
    custom_closing_time = Column(Text)
    custom_day_charges = Column(Float)
    custom_night_charges = Column(Float)
    recurrence_pattern = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    venue = relationship('Venues', back_populates='special_occasions')


class Bookings(Base):
    __tablename__ = 'bookings'

    venue_id = Column(ForeignKey('venues.id', ondelete='CASCADE'), nullable=False)
    booking_date = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)
    field_id = Column(ForeignKey('venue_fields.id'))
    player_id = Column(Integer)
    duration_hours = Column(Integer)
    total_amount = Column(Float)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    venue = relationship('Venues', back_populates='bookings')
    booking_slots = relationship('BookingSlots', back_populates='booking', cascade='all, delete-orphan')


class BookingSlots(Base):
    __tablename__ = 'booking_slots'

    booking_id = Column(ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False)
    slot_start_time = Column(Text, nullable=False)
    slot_end_time = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)

    booking = relationship('Bookings', back_populates='booking_slots')
