import json
import math
from enum import Enum


class Result(Enum):
    """Enumeration class for file integrity results"""

    VALID = 0
    ERROR_MISSING_FILE = 1
    ERROR_UNREADABLE_FILE = 2


def check_file_integrity(filename, required_section):
    """
    Extracts data from a JSON file and confirms that the required section is present
    """
    json_data = {}

    try:
        with open(filename, "r", encoding="utf-8", errors="replace") as json_file:
            json_data = json_file.read()
    except (FileNotFoundError, IsADirectoryError, TypeError):
        return Result.ERROR_MISSING_FILE, {}

    try:
        json_data = json.loads(json_data)
    except json.JSONDecodeError:
        return Result.ERROR_UNREADABLE_FILE, {}

    if not isinstance(json_data, dict) or not isinstance(
        json_data.get(required_section), list
    ):
        return Result.ERROR_UNREADABLE_FILE, {}

    return Result.VALID, json_data


def normalize_keyword(keyword):
    """
    Converts a free-form tag into its registry form.
    "Dragon Hoard" -> "dragon_hoard", " Tank " -> "tank"
    """
    tag = str(keyword).strip().lower()
    return "_".join(tag.replace("-", " ").split())


def round_half_up(value):
    """Rounds .5 away from zero for positive values (round() uses banker's rounding)"""
    return int(math.floor(value + 0.5))


def clamp(value, lower, upper):
    return max(lower, min(upper, value))
