"""Pricing service for booking fee calculation.

Prices are flat per slot (not per hour) and depend on the ground, the slot
length and whether the slot starts in the evening peak. The server computes
the fee; the amount the client shows the customer is never trusted.
"""

from datetime import time

# Price band constants
BAND_OFFPEAK = "offpeak"
BAND_PEAK = "peak"

# Peak runs overnight: from 17:00 until 05:00 the next morning
PEAK_START = time(17, 0)
PEAK_END = time(5, 0)

# ground -> duration -> {band: taka}
PRICE_TABLE: dict[int, dict[int, dict[str, int]]] = {
    1: {
        60: {BAND_OFFPEAK: 1000, BAND_PEAK: 1500},
        90: {BAND_OFFPEAK: 1500, BAND_PEAK: 2200},
    },
    2: {
        60: {BAND_OFFPEAK: 1000, BAND_PEAK: 1400},
        90: {BAND_OFFPEAK: 1400, BAND_PEAK: 2000},
    },
}


def determine_price_band(start_time: time) -> str:
    """Peak when the slot starts at or after 17:00 or before 05:00 (by start hour)."""
    hour = start_time.hour
    if hour >= PEAK_START.hour or hour < PEAK_END.hour:
        return BAND_PEAK
    return BAND_OFFPEAK


def calculate_booking_fee(ground_number: int, start_time: time, duration_minutes: int) -> tuple[int, str]:
    """Return (fee_taka, band) for a slot.

    Raises KeyError for a ground or duration with no price; callers validate
    both before pricing.
    """
    band = determine_price_band(start_time)
    return PRICE_TABLE[ground_number][duration_minutes][band], band


def price_list() -> dict[int, dict[int, dict[str, int]]]:
    """The full table, for display."""
    return {ground: {d: dict(bands) for d, bands in durations.items()} for ground, durations in PRICE_TABLE.items()}
