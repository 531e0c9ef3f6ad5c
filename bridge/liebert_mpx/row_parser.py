# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Row readers for the receptacle overview and the active alarm list.

Unlike the info pages these tables encode their data positionally:

  receptacle list (table#rcpTable), one row per receptacle, row id "P-B-R":
    label (a > nobr > text) | id | power icon | lock icon | health icon

  active alarms (div#DetailPanelArea > table):
    severity icon | location "P[-B[-R]]" | event name
"""

import logging

from .errors import StructureError
from .html_tree import (
    Element,
    RowLayout,
    child,
    elements,
    find,
    first_text,
    is_header_cell,
    table_rows,
)
from .pdu_model import (
    Event,
    ReceptacleListEntry,
    decode_event_type,
    decode_lock_state,
    decode_power_state,
    decode_severity,
    parse_location,
    parse_partial_location,
)
from .table_parser import locate_table

logger = logging.getLogger(__name__)

RECEPTACLE_TABLE_ID = "rcpTable"
ALARM_AREA = "DetailPanelArea"
NO_ALARMS = "No Alarms Present"

RECEPTACLE_ROW = RowLayout(
    "receptacle list", ("label", "id", "power", "lock", "health")
)
EVENT_ROW = RowLayout("alarm list", ("severity", "location", "event"))


def _first_element(cell: Element, what: str) -> Element:
    found = elements(cell)
    if not found:
        raise StructureError(f"{what} cell is empty")
    return found[0]


def _attr(node: Element, attr: str, what: str) -> str:
    value = node.get(attr)
    if value is None:
        raise StructureError(f"{what} element has no {attr!r} attribute")
    return value


# ---------------------------------------------------------------------------
# Receptacle list
# ---------------------------------------------------------------------------

def parse_receptacle_row(row: Element) -> ReceptacleListEntry:
    """Read one receptacle overview row."""
    row_id = row.id
    if row_id is None:
        raise StructureError("receptacle row has no id")
    location = parse_location(row_id)

    label = RECEPTACLE_ROW.cell(row, "label")
    link = child(label, "a")
    nobr = child(link, "nobr") if link is not None else None
    text = first_text(nobr) if nobr is not None else None
    if text is None:
        raise StructureError(f"receptacle {location} has no label text")

    power = _attr(
        _first_element(RECEPTACLE_ROW.cell(row, "power"), "power"),
        "title", "power",
    )
    lock = _attr(
        _first_element(RECEPTACLE_ROW.cell(row, "lock"), "lock"),
        "title", "lock",
    )
    health = _attr(
        _first_element(RECEPTACLE_ROW.cell(row, "health"), "health"),
        "src", "health",
    )

    return ReceptacleListEntry(
        location=location,
        enabled=decode_power_state(power, "power"),
        locked=decode_lock_state(lock, "lock"),
        status=decode_severity(health, "health"),
        label=text,
    )


def parse_receptacle_list(document: Element) -> list[ReceptacleListEntry]:
    """All receptacles from the overview page, in page order.

    The page is a bare fragment (no html/body), so the table is searched
    for anywhere in the document.

    Rows without an id are branch/section headers and are skipped.
    """
    table = find(document, "table", RECEPTACLE_TABLE_ID)
    if table is None:
        raise StructureError(f"expected table {RECEPTACLE_TABLE_ID!r} not found")

    entries = []
    for row in table_rows(table):
        if row.id is None:
            logger.debug("Skipping receptacle list row without id")
            continue
        entries.append(parse_receptacle_row(row))
    return entries


# ---------------------------------------------------------------------------
# Active alarms
# ---------------------------------------------------------------------------

def parse_event_row(row: Element) -> Event | None:
    """Read one alarm list row; None for header and 'no alarms' rows."""
    first = EVENT_ROW.cell(row, "severity")
    if is_header_cell(first):
        return None
    if first_text(first) == NO_ALARMS:
        return None

    icon = find(first, "img")
    if icon is None:
        raise StructureError("alarm row has no severity icon")
    level = decode_severity(_attr(icon, "src", "severity icon"))

    where = first_text(EVENT_ROW.cell(row, "location"))
    if where is None:
        raise StructureError("alarm row has no location text")
    location = parse_partial_location(where)

    name = first_text(EVENT_ROW.cell(row, "event"))
    if name is None:
        raise StructureError("alarm row has no event text")

    return Event(level=level, location=location, event=decode_event_type(name))


def parse_events(document: Element) -> list[Event]:
    """Active alarms from the alarm page, in page order."""
    table = locate_table(document, ALARM_AREA)
    events = []
    for row in table_rows(table):
        event = parse_event_row(row)
        if event is None:
            logger.debug("Skipping alarm list header row")
            continue
        events.append(event)
    return events
