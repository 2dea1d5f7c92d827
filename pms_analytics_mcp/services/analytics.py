"""
Dashboard summary computed from aggregated PMS data.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Any

from pms_analytics_mcp.models.common import (
    ReservationStatus,
    RoomStatus,
)
from pms_analytics_mcp.models.connection import Connection
from pms_analytics_mcp.models.records import PMSData

logger = logging.getLogger(__name__)

TREND_DAYS = 7
RECENT_RESERVATIONS = 5


def percent_change(current: float, previous: float) -> float:
    """Relative change in percent; 0 when there is no previous value."""
    if previous <= 0:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def _revenue_by_day(data: PMSData) -> dict[str, float]:
    # Several connections may report the same day
    totals: dict[str, float] = defaultdict(float)
    for entry in data.revenue:
        if entry.date:
            totals[entry.date] += entry.total_revenue
    return totals


def _occupancy_by_day(data: PMSData) -> list[dict[str, Any]]:
    days: dict[str, dict[str, float]] = defaultdict(
        lambda: {"total_rooms": 0, "occupied_rooms": 0, "room_revenue": 0.0}
    )
    for entry in data.occupancy:
        if not entry.date:
            continue
        day = days[entry.date]
        day["total_rooms"] += entry.total_rooms
        day["occupied_rooms"] += entry.occupied_rooms
        day["room_revenue"] += entry.adr * entry.occupied_rooms

    points = []
    for day_key in sorted(days)[-TREND_DAYS:]:
        day = days[day_key]
        total, occupied = day["total_rooms"], day["occupied_rooms"]
        points.append(
            {
                "date": day_key,
                "occupancy": round(occupied / total * 100, 1) if total else 0.0,
                "adr": round(day["room_revenue"] / occupied, 2) if occupied else 0.0,
                "revpar": round(day["room_revenue"] / total, 2) if total else 0.0,
            }
        )
    return points


def build_dashboard_summary(
    data: PMSData,
    connections: list[Connection],
    today: date | None = None,
    is_demo: bool = False,
) -> dict[str, Any]:
    """
    Compute the headline KPIs of the analytics dashboard.

    Args:
        data: Aggregated records of one or more connections
        connections: Registered connections (for the system status line)
        today: Day revenue is compared for (defaults to the current date)
        is_demo: Whether ``data`` is the demonstration dataset

    Returns:
        Dictionary with connection, inventory, revenue, occupancy and
        reservation figures plus seven-day trend series
    """
    today = today or date.today()
    yesterday = today - timedelta(days=1)

    total_rooms = len(data.rooms)
    room_status = data.room_status_counts()
    occupied_rooms = room_status.get(RoomStatus.OCCUPIED.value, 0)

    revenue_by_day = _revenue_by_day(data)
    today_revenue = revenue_by_day.get(today.isoformat(), 0.0)
    yesterday_revenue = revenue_by_day.get(yesterday.isoformat(), 0.0)

    occupancy_trend = _occupancy_by_day(data)
    reservation_status = data.reservation_status_counts()

    recent = []
    for reservation in data.reservations[:RECENT_RESERVATIONS]:
        guest = data.find_guest(reservation)
        recent.append(
            {
                "id": reservation.id,
                "connection_id": reservation.connection_id,
                "guest_name": guest.full_name if guest else None,
                "room_number": reservation.room_number,
                "check_in": reservation.check_in,
                "check_out": reservation.check_out,
                "status": reservation.status,
                "total_amount": reservation.total_amount,
            }
        )

    connected = [conn for conn in connections if conn.is_connected]

    summary = {
        "is_demo": is_demo,
        "systems": {
            "connected": len(connected),
            "total": len(connections),
            "online": bool(connected),
        },
        "totals": {
            "reservations": len(data.reservations),
            "guests": len(data.guests),
            "vip_guests": sum(1 for guest in data.guests if guest.vip_status),
            "rooms": total_rooms,
        },
        "rooms": {
            "occupied": occupied_rooms,
            "occupancy_rate": (
                round(occupied_rooms / total_rooms * 100, 1) if total_rooms else 0.0
            ),
            "status_breakdown": {
                status.value: room_status.get(status.value, 0) for status in RoomStatus
            },
        },
        "revenue": {
            "today": today_revenue,
            "yesterday": yesterday_revenue,
            "change_percent": percent_change(today_revenue, yesterday_revenue),
            "trend": [
                {"date": day, "revenue": revenue_by_day[day]}
                for day in sorted(revenue_by_day)[-TREND_DAYS:]
            ],
        },
        "occupancy": {
            "trend": occupancy_trend,
            "average_adr": (
                round(sum(p["adr"] for p in occupancy_trend) / len(occupancy_trend), 2)
                if occupancy_trend
                else 0.0
            ),
            "average_revpar": (
                round(
                    sum(p["revpar"] for p in occupancy_trend) / len(occupancy_trend), 2
                )
                if occupancy_trend
                else 0.0
            ),
        },
        "reservations": {
            "status_breakdown": {
                status.value: reservation_status.get(status.value, 0)
                for status in ReservationStatus
            },
            "recent": recent,
        },
    }

    logger.debug(
        "Dashboard summary computed",
        extra={"is_demo": is_demo, "record_counts": data.counts()},
    )
    return summary
