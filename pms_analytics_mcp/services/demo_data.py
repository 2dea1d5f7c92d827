"""
Fixed demonstration dataset.

Served when no connection is connected (or none returned data) so the
dashboard is never empty. Results built from it are flagged ``is_demo``.
"""

from pms_analytics_mcp.models.records import (
    Guest,
    OccupancyData,
    PMSData,
    Reservation,
    RevenueData,
    Room,
)

DEMO_CONNECTION_ID = "demo"

# id, guest, room, check-in, check-out, status, amount, source, created, updated
_RESERVATIONS = [
    ("res_1", "guest_1", "101", "2024-01-15", "2024-01-18", "confirmed", 450.0,
     "Booking.com", "2024-01-10T10:00:00Z", "2024-01-10T10:00:00Z"),
    ("res_2", "guest_2", "205", "2024-01-16", "2024-01-20", "checked_in", 680.0,
     "Direct", "2024-01-12T14:30:00Z", "2024-01-16T15:00:00Z"),
    ("res_3", "guest_3", "312", "2024-01-14", "2024-01-16", "checked_out", 320.0,
     "Expedia", "2024-01-08T09:15:00Z", "2024-01-16T11:00:00Z"),
    ("res_4", "guest_4", "408", "2024-01-17", "2024-01-19", "confirmed", 380.0,
     "Airbnb", "2024-01-13T16:45:00Z", "2024-01-13T16:45:00Z"),
    ("res_5", "guest_5", "501", "2024-01-18", "2024-01-22", "confirmed", 720.0,
     "Direct", "2024-01-14T11:20:00Z", "2024-01-14T11:20:00Z"),
]

# id, first, last, email, phone, nationality, vip, stays, spent, last stay
_GUESTS = [
    ("guest_1", "John", "Smith", "john.smith@email.com", "+1-555-0123", "US",
     False, 3, 1250.0, "2024-01-18"),
    ("guest_2", "Sarah", "Johnson", "sarah.j@email.com", "+1-555-0456", "CA",
     True, 8, 4200.0, "2024-01-20"),
    ("guest_3", "Michael", "Brown", "mike.brown@email.com", "+44-20-7946-0958",
     "UK", False, 1, 320.0, "2024-01-16"),
    ("guest_4", "Emma", "Davis", "emma.davis@email.com", "+33-1-42-86-83-26",
     "FR", False, 2, 760.0, "2024-01-19"),
    ("guest_5", "David", "Wilson", "david.wilson@email.com", "+1-555-0789", "US",
     True, 12, 8900.0, "2024-01-22"),
]

# number, type, status, floor, capacity, rate
_ROOMS = [
    ("101", "Standard", "available", 1, 2, 150.0),
    ("102", "Standard", "occupied", 1, 2, 150.0),
    ("201", "Deluxe", "occupied", 2, 3, 200.0),
    ("202", "Deluxe", "available", 2, 3, 200.0),
    ("205", "Deluxe", "occupied", 2, 3, 200.0),
    ("301", "Suite", "available", 3, 4, 300.0),
    ("312", "Suite", "maintenance", 3, 4, 300.0),
    ("401", "Premium", "available", 4, 2, 250.0),
    ("408", "Premium", "occupied", 4, 2, 250.0),
    ("501", "Penthouse", "occupied", 5, 6, 500.0),
    ("502", "Penthouse", "out_of_order", 5, 6, 500.0),
    ("103", "Standard", "available", 1, 2, 150.0),
]

# date, rooms, food & beverage, other
_REVENUE = [
    ("2024-01-16", 2400.0, 800.0, 200.0),
    ("2024-01-15", 2200.0, 750.0, 150.0),
    ("2024-01-14", 2600.0, 900.0, 300.0),
    ("2024-01-13", 2100.0, 650.0, 100.0),
    ("2024-01-12", 2800.0, 950.0, 250.0),
    ("2024-01-11", 2300.0, 700.0, 180.0),
    ("2024-01-10", 2500.0, 820.0, 220.0),
]

# date, occupied rooms, adr (12 rooms in the property)
_OCCUPANCY = [
    ("2024-01-16", 8, 225.0),
    ("2024-01-15", 7, 210.0),
    ("2024-01-14", 9, 240.0),
    ("2024-01-13", 6, 195.0),
    ("2024-01-12", 10, 260.0),
    ("2024-01-11", 7, 215.0),
    ("2024-01-10", 8, 230.0),
]

_TOTAL_ROOMS = 12


def build_demo_data() -> PMSData:
    """Return a fresh copy of the demonstration dataset."""
    reservations = [
        Reservation(
            id=res_id,
            guest_id=guest_id,
            room_number=room,
            check_in=check_in,
            check_out=check_out,
            status=status,
            total_amount=amount,
            currency="USD",
            source=source,
            created_at=created,
            updated_at=updated,
            connection_id=DEMO_CONNECTION_ID,
        )
        for (res_id, guest_id, room, check_in, check_out, status, amount, source,
             created, updated) in _RESERVATIONS
    ]
    guests = [
        Guest(
            id=guest_id,
            first_name=first,
            last_name=last,
            email=email,
            phone=phone,
            nationality=nationality,
            vip_status=vip,
            total_stays=stays,
            total_spent=spent,
            last_stay=last_stay,
            connection_id=DEMO_CONNECTION_ID,
        )
        for (guest_id, first, last, email, phone, nationality, vip, stays, spent,
             last_stay) in _GUESTS
    ]
    rooms = [
        Room(
            id=f"room_{index}",
            number=number,
            type=room_type,
            status=status,
            floor=floor,
            capacity=capacity,
            rate=rate,
            connection_id=DEMO_CONNECTION_ID,
        )
        for index, (number, room_type, status, floor, capacity, rate) in enumerate(
            _ROOMS, start=1
        )
    ]
    revenue = [
        RevenueData(
            date=day,
            room_revenue=room_revenue,
            fb_revenue=fb_revenue,
            other_revenue=other_revenue,
            total_revenue=room_revenue + fb_revenue + other_revenue,
            currency="USD",
            connection_id=DEMO_CONNECTION_ID,
        )
        for day, room_revenue, fb_revenue, other_revenue in _REVENUE
    ]
    occupancy = [
        OccupancyData(
            date=day,
            total_rooms=_TOTAL_ROOMS,
            occupied_rooms=occupied,
            occupancy_rate=round(occupied / _TOTAL_ROOMS * 100, 1),
            adr=adr,
            revpar=round(adr * occupied / _TOTAL_ROOMS, 1),
            connection_id=DEMO_CONNECTION_ID,
        )
        for day, occupied, adr in _OCCUPANCY
    ]
    return PMSData(
        reservations=reservations,
        guests=guests,
        rooms=rooms,
        revenue=revenue,
        occupancy=occupancy,
    )
