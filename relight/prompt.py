"""
Golden-hour relighting prompt.

The prompt text lives in ``prompts/golden_hour.txt`` as a Jinja2 template;
this module only prepares the values substituted into it.
"""

from datetime import date as calendar_date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

MAX_FIELD_LENGTH = 500

BEARING_TO_DIRECTION = {
    "N": "north",
    "NE": "northeast",
    "E": "east",
    "SE": "southeast",
    "S": "south",
    "SW": "southwest",
    "W": "west",
    "NW": "northwest",
}

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent / "prompts")),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def escape_field(value: str) -> str:
    """Flatten line breaks and cap length so user text cannot restructure the prompt."""
    return (value or "").replace("\r", " ").replace("\n", " ")[:MAX_FIELD_LENGTH]


def format_date(value: str) -> str:
    """'2024-06-15' -> 'June 15, 2024'. Unparseable input is returned unchanged."""
    try:
        d = calendar_date.fromisoformat(value)
    except (TypeError, ValueError):
        return value
    return f"{MONTHS[d.month - 1]} {d.day}, {d.year}"


def bearing_direction(bearing: str) -> str:
    bearing = getattr(bearing, "value", bearing)
    return BEARING_TO_DIRECTION.get(bearing, bearing.lower())


def generate_prompt(address: str, date: str, bearing: str) -> str:
    template = _env.get_template("golden_hour.txt")
    return template.render(
        address=escape_field(address),
        date=format_date(date),
        direction=bearing_direction(bearing),
    )
