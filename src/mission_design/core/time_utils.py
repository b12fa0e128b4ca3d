"""
===============================================================================
MISSION DESIGN - Time Systems
===============================================================================
Calendar <-> Julian Date conversion and Greenwich Mean Sidereal Time.

All epochs are handled as timezone-aware UTC ``datetime`` objects.  A naive
``datetime`` is interpreted as UTC.  UT1 - UTC is neglected, which is well
inside the accuracy of the spherical-Earth ground geometry built on top.

References
----------
    [1] Meeus, "Astronomical Algorithms", 2nd ed., Ch. 7 (Julian Day).
    [2] Vallado, "Fundamentals of Astrodynamics and Applications", 4th ed.,
        Eq. 3-45 (IAU-1982 GMST).
===============================================================================
"""

import math
from datetime import datetime, timedelta, timezone

from mission_design.core.constants import (
    DAYS_PER_CENTURY,
    JD_J2000,
    JD_MJD_OFFSET,
    SEC_PER_DAY,
    TWO_PI,
)


def ensure_utc(date: datetime) -> datetime:
    """Return *date* as an aware UTC datetime (naive input is taken as UTC)."""
    if date.tzinfo is None:
        return date.replace(tzinfo=timezone.utc)
    return date.astimezone(timezone.utc)


def date_to_julian(date: datetime) -> float:
    """
    Convert a calendar date to a Julian Date (Gregorian calendar).

    Meeus' algorithm:

        if month <= 2: year -= 1, month += 12
        A  = floor(year / 100)
        B  = 2 - A + floor(A / 4)
        JD = floor(365.25 (year + 4716)) + floor(30.6001 (month + 1))
             + day + B - 1524.5 + day_fraction

    Parameters
    ----------
    date : datetime
        UTC epoch.

    Returns
    -------
    float
        Julian Date (days).
    """
    date = ensure_utc(date)
    day_fraction = (
        date.hour
        + date.minute / 60.0
        + (date.second + date.microsecond / 1e6) / 3600.0
    ) / 24.0

    year = date.year
    month = date.month
    if month <= 2:
        year -= 1
        month += 12

    A = math.floor(year / 100)
    B = 2 - A + math.floor(A / 4)

    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + date.day + day_fraction + B - 1524.5
    )


def julian_to_date(jd: float) -> datetime:
    """
    Convert a Julian Date back to an aware UTC datetime.

    Inverse of :func:`date_to_julian` (Meeus, Ch. 7).  The time of day is
    rounded to the millisecond, so a round trip agrees far better than the
    one-second requirement of the calendar/sidereal consumers.
    """
    z = math.floor(jd + 0.5)
    f = jd + 0.5 - z

    if z < 2299161:
        A = z
    else:
        alpha = math.floor((z - 1867216.25) / 36524.25)
        A = z + 1 + alpha - math.floor(alpha / 4)

    B = A + 1524
    C = math.floor((B - 122.1) / 365.25)
    D = math.floor(365.25 * C)
    E = math.floor((B - D) / 30.6001)

    day = B - D - math.floor(30.6001 * E) + f
    month = E - 1 if E < 14 else E - 13
    year = C - 4716 if month > 2 else C - 4715

    whole_day = math.floor(day)
    seconds = round((day - whole_day) * SEC_PER_DAY, 3)

    return (
        datetime(int(year), int(month), int(whole_day), tzinfo=timezone.utc)
        + timedelta(seconds=seconds)
    )


def date_to_julian_centuries(date: datetime) -> float:
    """Julian centuries elapsed since J2000.0."""
    return (date_to_julian(date) - JD_J2000) / DAYS_PER_CENTURY


def date_to_mjd(date: datetime) -> float:
    """Modified Julian Date."""
    return date_to_julian(date) - JD_MJD_OFFSET


def date_to_gmst(date: datetime) -> float:
    """
    Greenwich Mean Sidereal Time (IAU-1982 polynomial).

    With T the Julian centuries of the full UT epoch (time of day included):

        GMST[s] = 67310.54841 + (876600 h + 8640184.812866) T
                  + 0.093104 T^2 - 6.2e-6 T^3

    The result is reduced modulo one day of seconds, converted to radians
    and normalised into [0, 2*pi).

    Parameters
    ----------
    date : datetime
        UTC epoch.

    Returns
    -------
    float
        GMST in radians, 0 <= gmst < 2*pi.
    """
    T = date_to_julian_centuries(date)

    gmst_sec = (
        67310.54841
        + (876600.0 * 3600.0 + 8640184.812866) * T
        + 0.093104 * T * T
        - 6.2e-6 * T * T * T
    )

    gmst = (gmst_sec % SEC_PER_DAY) * (TWO_PI / SEC_PER_DAY)
    gmst = gmst % TWO_PI
    if gmst >= TWO_PI:
        gmst = 0.0
    return gmst
