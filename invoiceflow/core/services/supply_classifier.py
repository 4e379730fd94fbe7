"""
Supply classification and GST identifier helpers.

Decides inter-state vs intra-state supply from the owner and client state
codes, and validates the identifiers that feed that decision.
"""

import re

from invoiceflow.core.exceptions import InvalidGstinError, InvalidStateCodeError

GST_STATE_CODES = {
    "01": "Jammu & Kashmir", "02": "Himachal Pradesh", "03": "Punjab",
    "04": "Chandigarh", "05": "Uttarakhand", "06": "Haryana",
    "07": "Delhi", "08": "Rajasthan", "09": "Uttar Pradesh",
    "10": "Bihar", "11": "Sikkim", "12": "Arunachal Pradesh",
    "13": "Nagaland", "14": "Manipur", "15": "Mizoram",
    "16": "Tripura", "17": "Meghalaya", "18": "Assam",
    "19": "West Bengal", "20": "Jharkhand", "21": "Odisha",
    "22": "Chhattisgarh", "23": "Madhya Pradesh", "24": "Gujarat",
    "25": "Daman & Diu", "26": "Dadra & Nagar Haveli and Daman & Diu",
    "27": "Maharashtra", "28": "Andhra Pradesh (Old)", "29": "Karnataka",
    "30": "Goa", "31": "Lakshadweep", "32": "Kerala", "33": "Tamil Nadu",
    "34": "Puducherry", "35": "Andaman & Nicobar Islands",
    "36": "Telangana", "37": "Andhra Pradesh", "38": "Ladakh",
}

STATE_CODE_PATTERN = re.compile(r"^\d{2}$")
GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}Z[0-9A-Z]{1}$")


def is_inter_state(owner_state_code: str, client_state_code: str) -> bool:
    """
    Classify a supply.

    Pure string comparison; callers validate the codes beforehand.
    """
    return owner_state_code != client_state_code


def validate_state_code(code: str | None, field: str = "state_code") -> str:
    """Return the code if it is a GST state code 01-38, else raise."""
    value = (code or "").strip()
    if not STATE_CODE_PATTERN.match(value) or value not in GST_STATE_CODES:
        raise InvalidStateCodeError(field, code)
    return value


def parse_place_of_supply(place_of_supply: str | None) -> str | None:
    """
    Extract the state code from a place of supply.

    Accepts "29" or "29-Karnataka". Returns None for empty input; the code is
    not range-checked here.
    """
    if not place_of_supply:
        return None
    code = place_of_supply.split("-", 1)[0].strip()
    return code or None


def state_name(code: str) -> str | None:
    """Human-readable state name for a code."""
    return GST_STATE_CODES.get(code)


def format_place_of_supply(code: str) -> str:
    """Render a state code as "29-Karnataka"."""
    name = state_name(code)
    return f"{code}-{name}" if name else code


def is_valid_gstin(gstin: str | None) -> bool:
    if not gstin:
        return False
    return bool(GSTIN_PATTERN.match(gstin.strip().upper()))


def validate_gstin(gstin: str) -> str:
    """Normalize and validate a GSTIN, raising InvalidGstinError."""
    value = (gstin or "").strip().upper()
    if not GSTIN_PATTERN.match(value):
        raise InvalidGstinError(gstin)
    return value


def state_code_from_gstin(gstin: str) -> str:
    """The first two digits of a GSTIN are the registrant's state code."""
    return validate_gstin(gstin)[:2]
