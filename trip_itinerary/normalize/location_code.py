"""Validation of 3-letter airport/city codes."""

import re

from trip_itinerary.config import LOCATION_CODE_LENGTH
from trip_itinerary.errors import InvalidCodeFormat, InvalidCodeLength

_CODE_RE = re.compile(r"[A-Z]{3}")


def check_code_length(code: str, field_name: str):
    # Runs before the line's strict pattern and before check_code_format.
    if len(code) != LOCATION_CODE_LENGTH:
        raise InvalidCodeLength(field_name=field_name, value=code)


def check_code_format(code: str, field_name: str):
    if not _CODE_RE.fullmatch(code):
        raise InvalidCodeFormat(field_name=field_name, value=code)
