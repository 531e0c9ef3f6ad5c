# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Region locator and key/value table extraction for MPX info pages.

Every PDU, branch and receptacle info page has the same four areas,
each holding one table:

  RpcStatusArea   label | value | unit     (measurements)
  RpcAlarmArea    icon  | label            (per-alarm severity)
  RpcSettingArea  label | value | unit     (user settings)
  RpcInfoArea     label | value | unit     (hardware/firmware)

Tables are read into a RawTable (label -> TableValue) which the record
builders then turn into typed records.
"""

import enum
import logging
from dataclasses import dataclass

from .errors import StructureError
from .html_tree import (
    Element,
    RowLayout,
    find,
    first_text,
    is_header_cell,
    table_rows,
)

logger = logging.getLogger(__name__)

AREA_STATUS = "RpcStatusArea"
AREA_ALARM = "RpcAlarmArea"
AREA_SETTING = "RpcSettingArea"
AREA_INFO = "RpcInfoArea"


@dataclass(frozen=True)
class TableValue:
    value: str      # e.g. "23.42"
    unit: str       # e.g. "kWH", "VAC", "" when the table has no unit column


RawTable = dict[str, TableValue]


class TableMode(enum.Enum):
    PLAIN = "plain"     # label | value | unit
    ICON = "icon"       # icon | label


PLAIN_ROW = RowLayout("plain table", ("label", "value", "unit"))
ICON_ROW = RowLayout("alarm table", ("value", "label"))


def extract_table(table: Element, mode: TableMode) -> RawTable:
    """Read a key/value table into a RawTable.

    Rows whose label cell is a ``th`` are headers and are skipped.
    Duplicate labels overwrite earlier ones.
    """
    layout = ICON_ROW if mode is TableMode.ICON else PLAIN_ROW
    result: RawTable = {}

    for row in table_rows(table):
        label_cell = layout.cell(row, "label")
        if is_header_cell(label_cell):
            logger.debug("Skipping header row in %s", layout.name)
            continue

        label = first_text(label_cell)
        if label is None:
            raise StructureError(f"{layout.name} row has no label text")

        value_cell = layout.cell(row, "value")
        if mode is TableMode.ICON:
            value = _icon_src(value_cell, label)
            unit = ""
        else:
            value = first_text(value_cell)
            if value is None:
                raise StructureError(f"{layout.name} row {label!r} has no value text")
            unit_cell = layout.get(row, "unit")
            if unit_cell is None:
                unit = ""
            else:
                unit = first_text(unit_cell)
                if unit is None:
                    raise StructureError(
                        f"{layout.name} row {label!r} has an empty unit cell"
                    )

        result[label] = TableValue(value=value, unit=unit)

    return result


def _icon_src(cell: Element, label: str) -> str:
    img = find(cell, "img")
    if img is None:
        raise StructureError(f"alarm row {label!r} has no icon")
    src = img.get("src")
    if src is None:
        raise StructureError(f"alarm row {label!r} icon has no src")
    return src


def locate_body(document: Element) -> Element:
    body = find(document, "body")
    if body is None:
        raise StructureError("document has no body")
    return body


def locate_table(document: Element, container_id: str,
                 container: str = "div") -> Element:
    """Find ``<container id=container_id>`` inside the body and return
    the first table within it."""
    body = locate_body(document)
    area = find(body, container, container_id)
    if area is None:
        raise StructureError(f"expected container {container_id!r} not found")
    table = find(area, "table")
    if table is None:
        raise StructureError(f"no table inside container {container_id!r}")
    return table


@dataclass(frozen=True)
class InfoTables:
    status: RawTable
    events: RawTable
    settings: RawTable
    hardware: RawTable


def get_info_tables(document: Element) -> InfoTables:
    """Extract the four tables of an info page."""
    status = locate_table(document, AREA_STATUS)
    alarm = locate_table(document, AREA_ALARM)
    settings = locate_table(document, AREA_SETTING)
    hardware = locate_table(document, AREA_INFO)

    tables = InfoTables(
        status=extract_table(status, TableMode.PLAIN),
        events=extract_table(alarm, TableMode.ICON),
        settings=extract_table(settings, TableMode.PLAIN),
        hardware=extract_table(hardware, TableMode.PLAIN),
    )
    logger.debug(
        "Info tables: %d status, %d events, %d settings, %d hardware rows",
        len(tables.status), len(tables.events),
        len(tables.settings), len(tables.hardware),
    )
    return tables
