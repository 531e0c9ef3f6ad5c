# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Build typed PDU/branch/receptacle records from extracted tables.

Each record type is described by an ordered field list of
(attribute, page label, converter). Fields are converted in that order
and the first failure aborts the build, so a record is either complete
or not returned at all.

Numeric converters compare the unit printed on the page with the unit
the field is defined in *before* parsing the number; a firmware that
reports a value in different units fails loudly.
"""

import logging
import re
from typing import Any, Callable

from .errors import MissingField, UnrecognizedValue
from .html_tree import NBSP, Element
from .pdu_model import (
    BranchEvents,
    BranchHardware,
    BranchInfo,
    BranchSettings,
    BranchStatus,
    PDUEvents,
    PDUHardware,
    PDUInfo,
    PDUSettings,
    PDUStatus,
    ReceptacleEvents,
    ReceptacleHardware,
    ReceptacleInfo,
    ReceptacleSettings,
    ReceptacleStatus,
    decode_brm_model,
    decode_capability,
    decode_line_source,
    decode_lock_state,
    decode_pem_model,
    decode_power_state,
    decode_receptacle_type,
    decode_severity,
    decode_wiring_type,
    parse_firmware_version,
)
from .table_parser import InfoTables, RawTable, TableValue, get_info_tables

logger = logging.getLogger(__name__)

# Units as printed by the web interface
UNIT_KWH = "kWH"
UNIT_WATT = "W"
UNIT_VA = "VA"
UNIT_VOLT = "VAC"
UNIT_AMP = "A AC"
UNIT_PERCENT = "%"
UNIT_HERTZ = "Hz"
UNIT_SECONDS = "sec"
UNIT_NONE = NBSP        # unit cell of dimensionless values holds &nbsp;

_FLOAT_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_UINT_RE = re.compile(r"\d+")

Converter = Callable[[str, TableValue], Any]


def _check_unit(label: str, item: TableValue, unit: str):
    if item.unit != unit:
        raise UnrecognizedValue(f"unit (expected {unit!r})", item.unit, label)


def reading(unit: str) -> Converter:
    """Measured float value in *unit*."""
    def convert(label: str, item: TableValue) -> float:
        _check_unit(label, item, unit)
        if not _FLOAT_RE.fullmatch(item.value):
            raise UnrecognizedValue("number", item.value, label)
        return float(item.value)
    return convert


def count(unit: str) -> Converter:
    """Unsigned integer value in *unit* (thresholds, ratings, delays)."""
    def convert(label: str, item: TableValue) -> int:
        _check_unit(label, item, unit)
        if not _UINT_RE.fullmatch(item.value):
            raise UnrecognizedValue("unsigned integer", item.value, label)
        return int(item.value)
    return convert


def decoded(decoder: Callable[..., Any]) -> Converter:
    """Closed-vocabulary value (enum, flag word, icon path)."""
    def convert(label: str, item: TableValue):
        return decoder(item.value, label)
    return convert


def text(label: str, item: TableValue) -> str:
    return item.value


def asset_tag(label: str, item: TableValue) -> str:
    # Empty asset tags are rendered as &nbsp;
    return item.value.replace(NBSP, "")


def firmware(label: str, item: TableValue):
    return parse_firmware_version(item.value)


severity = decoded(decode_severity)

FieldDef = tuple[str, str, Converter]


def build(record_type: type, table: RawTable, field_defs: tuple[FieldDef, ...]):
    """Convert *table* into *record_type* following *field_defs* in order."""
    values = {}
    for attr, label, convert in field_defs:
        item = table.get(label)
        if item is None:
            raise MissingField(label)
        values[attr] = convert(label, item)
    return record_type(**values)


# ---------------------------------------------------------------------------
# PDU
# ---------------------------------------------------------------------------

PDU_STATUS_FIELDS: tuple[FieldDef, ...] = (
    ("accumulated_energy", "PDU Accumulated Energy", reading(UNIT_KWH)),
    ("input_power", "PDU Total Input Power", reading(UNIT_WATT)),
    ("voltage_l1_n", "PDU Voltage L1-N", reading(UNIT_VOLT)),
    ("voltage_l2_n", "PDU Voltage L2-N", reading(UNIT_VOLT)),
    ("voltage_l3_n", "PDU Voltage L3-N", reading(UNIT_VOLT)),
    ("current_l1", "PDU Current L1", reading(UNIT_AMP)),
    ("current_l2", "PDU Current L2", reading(UNIT_AMP)),
    ("current_l3", "PDU Current L3", reading(UNIT_AMP)),
    ("current_n", "PDU Neutral Current Measurement", reading(UNIT_AMP)),
    ("current_available_to_alarm_l1", "PDU Available L1 Current Until Alarm", reading(UNIT_AMP)),
    ("current_available_to_alarm_l2", "PDU Available L2 Current Until Alarm", reading(UNIT_AMP)),
    ("current_available_to_alarm_l3", "PDU Available L3 Current Until Alarm", reading(UNIT_AMP)),
    ("current_utilization_l1", "PDU Percent L1 Current Utilization", reading(UNIT_PERCENT)),
    ("current_utilization_l2", "PDU Percent L2 Current Utilization", reading(UNIT_PERCENT)),
    ("current_utilization_l3", "PDU Percent L3 Current Utilization", reading(UNIT_PERCENT)),
    ("line_frequency", "PEM Line Frequency", reading(UNIT_HERTZ)),
)

PDU_SETTINGS_FIELDS: tuple[FieldDef, ...] = (
    ("label", "PDU User Assigned Label", text),
    ("asset_tag_1", "PDU Asset Tag 01", asset_tag),
    ("asset_tag_2", "PDU Asset Tag 02", asset_tag),
    ("n_over_current_alarm_threshold", "Neutral Over Current Alarm Threshold", count(UNIT_PERCENT)),
    ("n_over_current_warning_threshold", "Neutral Over Current Warning Threshold", count(UNIT_PERCENT)),
    ("l1_over_current_warning_threshold", "Over Current Warn Threshold L1", count(UNIT_PERCENT)),
    ("l2_over_current_warning_threshold", "Over Current Warn Threshold L2", count(UNIT_PERCENT)),
    ("l3_over_current_warning_threshold", "Over Current Warn Threshold L3", count(UNIT_PERCENT)),
    ("l1_over_current_alarm_threshold", "Over Current Alarm Threshold L1", count(UNIT_PERCENT)),
    ("l2_over_current_alarm_threshold", "Over Current Alarm Threshold L2", count(UNIT_PERCENT)),
    ("l3_over_current_alarm_threshold", "Over Current Alarm Threshold L3", count(UNIT_PERCENT)),
    ("l1_low_current_alarm_threshold", "Low Current Alarm Threshold L1", count(UNIT_PERCENT)),
    ("l2_low_current_alarm_threshold", "Low Current Alarm Threshold L2", count(UNIT_PERCENT)),
    ("l3_low_current_alarm_threshold", "Low Current Alarm Threshold L3", count(UNIT_PERCENT)),
)

PDU_HARDWARE_FIELDS: tuple[FieldDef, ...] = (
    ("pem_model", "PEM Model", decoded(decode_pem_model)),
    ("wiring_type", "The PDU input wiring type", decoded(decode_wiring_type)),
    ("rated_input_voltage", "Rated Input Line Voltage", count(UNIT_VOLT)),
    ("rated_input_current", "Rated Input Line Current", count(UNIT_AMP)),
    ("rated_input_line_frequency", "Rated Input Line Frequency", count(UNIT_HERTZ)),
    ("fw_version", "Firmware Version", firmware),
    ("serial_number", "PEM Serial Number", text),
)

PDU_EVENTS_FIELDS: tuple[FieldDef, ...] = (
    ("low_voltage_l1", "PDU Low Voltage L1-N", severity),
    ("low_voltage_l2", "PDU Low Voltage L2-N", severity),
    ("low_voltage_l3", "PDU Low Voltage L3-N", severity),
    ("over_current_l1", "PDU Over Current L1", severity),
    ("over_current_l2", "PDU Over Current L2", severity),
    ("over_current_l3", "PDU Over Current L3", severity),
    ("low_current_l1", "PDU Low Current L1", severity),
    ("low_current_l2", "PDU Low Current L2", severity),
    ("low_current_l3", "PDU Low Current L3", severity),
    ("failure", "PDU Failure", severity),
    ("communication_fail", "PDU Communication Fail", severity),
    ("over_current_n", "PDU Neutral Over Current", severity),
)


def build_pdu_status(table: RawTable) -> PDUStatus:
    return build(PDUStatus, table, PDU_STATUS_FIELDS)


def build_pdu_settings(table: RawTable) -> PDUSettings:
    return build(PDUSettings, table, PDU_SETTINGS_FIELDS)


def build_pdu_hardware(table: RawTable) -> PDUHardware:
    return build(PDUHardware, table, PDU_HARDWARE_FIELDS)


def build_pdu_events(table: RawTable) -> PDUEvents:
    return build(PDUEvents, table, PDU_EVENTS_FIELDS)


def build_pdu_info(tables: InfoTables) -> PDUInfo:
    return PDUInfo(
        status=build_pdu_status(tables.status),
        events=build_pdu_events(tables.events),
        settings=build_pdu_settings(tables.settings),
        hardware=build_pdu_hardware(tables.hardware),
    )


# ---------------------------------------------------------------------------
# Branch
# ---------------------------------------------------------------------------

BRANCH_STATUS_FIELDS: tuple[FieldDef, ...] = (
    ("accumulated_energy", "Branch Accumulated Energy", reading(UNIT_KWH)),
    ("voltage", "Branch Voltage", reading(UNIT_VOLT)),
    ("current", "Branch Current", reading(UNIT_AMP)),
    ("current_available_to_alarm", "Branch Available Current Until Alarm", reading(UNIT_AMP)),
    ("current_utilization", "Branch Percent Current Utilization", reading(UNIT_PERCENT)),
    ("power", "Branch Power", reading(UNIT_WATT)),
    ("apparent_power", "Branch Apparent Power", reading(UNIT_VA)),
    ("power_factor", "Branch Power Factor", reading(UNIT_NONE)),
)

BRANCH_SETTINGS_FIELDS: tuple[FieldDef, ...] = (
    ("label", "Branch User Assigned Label", text),
    ("asset_tag_1", "Branch Asset Tag 01", asset_tag),
    ("asset_tag_2", "Branch Asset Tag 02", asset_tag),
    ("over_current_alarm_threshold", "Over Current Alarm Threshold", count(UNIT_PERCENT)),
    ("over_current_warning_threshold", "Over Current Warning Threshold", count(UNIT_PERCENT)),
    ("low_current_alarm_threshold", "Low Current Alarm Threshold", count(UNIT_PERCENT)),
)

BRANCH_HARDWARE_FIELDS: tuple[FieldDef, ...] = (
    ("brm_model", "BRM Model", decoded(decode_brm_model)),
    ("receptacle_type", "Branch Receptacle Type", decoded(decode_receptacle_type)),
    ("capabilities", "Branch Capabilities", decoded(decode_capability)),
    ("line_source", "Branch Line Source", decoded(decode_line_source)),
    ("rated_line_voltage", "Branch Rated Line Voltage", count(UNIT_VOLT)),
    ("rated_line_current", "Branch Rated Line Current", count(UNIT_AMP)),
    ("rated_line_frequency", "Branch Rated Line Frequency", count(UNIT_HERTZ)),
    ("fw_version", "Firmware Version", firmware),
    ("serial_number", "Branch Serial Number", text),
)

BRANCH_EVENTS_FIELDS: tuple[FieldDef, ...] = (
    ("low_voltage", "Branch Low Voltage (LN)", severity),
    ("over_current", "Branch Over Current", severity),
    ("low_current", "Branch Low Current", severity),
    ("failure", "Branch Failure", severity),
    ("breaker_open", "Branch Breaker Open", severity),
)


def build_branch_status(table: RawTable) -> BranchStatus:
    return build(BranchStatus, table, BRANCH_STATUS_FIELDS)


def build_branch_settings(table: RawTable) -> BranchSettings:
    return build(BranchSettings, table, BRANCH_SETTINGS_FIELDS)


def build_branch_hardware(table: RawTable) -> BranchHardware:
    return build(BranchHardware, table, BRANCH_HARDWARE_FIELDS)


def build_branch_events(table: RawTable) -> BranchEvents:
    return build(BranchEvents, table, BRANCH_EVENTS_FIELDS)


def build_branch_info(tables: InfoTables) -> BranchInfo:
    return BranchInfo(
        status=build_branch_status(tables.status),
        events=build_branch_events(tables.events),
        settings=build_branch_settings(tables.settings),
        hardware=build_branch_hardware(tables.hardware),
    )


# ---------------------------------------------------------------------------
# Receptacle
# ---------------------------------------------------------------------------

RECEPTACLE_STATUS_FIELDS: tuple[FieldDef, ...] = (
    ("accumulated_energy", "Receptacle Accumulated Energy", reading(UNIT_KWH)),
    ("voltage", "Receptacle Voltage", reading(UNIT_VOLT)),
    ("current", "Receptacle Current", reading(UNIT_AMP)),
    ("current_available_to_alarm", "Receptacle Available Current Until Alarm", reading(UNIT_AMP)),
    ("current_utilization", "Receptacle Percent Current Utilization", reading(UNIT_PERCENT)),
    ("power", "Receptacle Power", reading(UNIT_WATT)),
    ("apparent_power", "Receptacle Apparent Power", reading(UNIT_VA)),
    ("power_factor", "Receptacle Power Factor", reading(UNIT_NONE)),
    ("current_crest_factor", "Receptacle Current Crest Factor", reading(UNIT_NONE)),
)

RECEPTACLE_SETTINGS_FIELDS: tuple[FieldDef, ...] = (
    ("label", "Receptacle User Assigned Label", text),
    ("asset_tag_1", "Receptacle Asset Tag 01", asset_tag),
    ("asset_tag_2", "Receptacle Asset Tag 02", asset_tag),
    ("over_current_alarm_threshold", "Over Current Alarm Threshold", count(UNIT_PERCENT)),
    ("over_current_warning_threshold", "Over Current Warning Threshold", count(UNIT_PERCENT)),
    ("low_current_alarm_threshold", "Low Current Alarm Threshold", count(UNIT_PERCENT)),
    ("power_state", "Receptacle Power State", decoded(decode_power_state)),
    ("power_control", "Receptacle Power Control", decoded(decode_power_state)),
    ("control_lock_state", "Receptacle Control Lock State", decoded(decode_lock_state)),
    ("power_on_delay", "Receptacle Power On Delay", count(UNIT_SECONDS)),
)

RECEPTACLE_HARDWARE_FIELDS: tuple[FieldDef, ...] = (
    ("receptacle_type", "Receptacle Type", decoded(decode_receptacle_type)),
    ("line_source", "Receptacle Line Source", decoded(decode_line_source)),
    ("capabilities", "Receptacle Capabilities", decoded(decode_capability)),
)

RECEPTACLE_EVENTS_FIELDS: tuple[FieldDef, ...] = (
    ("over_current", "Receptacle Over Current", severity),
    ("low_current", "Receptacle Low Current", severity),
)


def build_receptacle_status(table: RawTable) -> ReceptacleStatus:
    return build(ReceptacleStatus, table, RECEPTACLE_STATUS_FIELDS)


def build_receptacle_settings(table: RawTable) -> ReceptacleSettings:
    return build(ReceptacleSettings, table, RECEPTACLE_SETTINGS_FIELDS)


def build_receptacle_hardware(table: RawTable) -> ReceptacleHardware:
    return build(ReceptacleHardware, table, RECEPTACLE_HARDWARE_FIELDS)


def build_receptacle_events(table: RawTable) -> ReceptacleEvents:
    return build(ReceptacleEvents, table, RECEPTACLE_EVENTS_FIELDS)


def build_receptacle_info(tables: InfoTables) -> ReceptacleInfo:
    return ReceptacleInfo(
        status=build_receptacle_status(tables.status),
        events=build_receptacle_events(tables.events),
        settings=build_receptacle_settings(tables.settings),
        hardware=build_receptacle_hardware(tables.hardware),
    )


# ---------------------------------------------------------------------------
# Whole pages
# ---------------------------------------------------------------------------

def parse_pdu_info(document: Element) -> PDUInfo:
    """Parse a PDU (rpcAps.htm) info page."""
    info = build_pdu_info(get_info_tables(document))
    logger.debug("Parsed PDU info: %s", info.settings.label)
    return info


def parse_branch_info(document: Element) -> BranchInfo:
    """Parse a branch (rpcRem.htm) info page."""
    info = build_branch_info(get_info_tables(document))
    logger.debug("Parsed branch info: %s", info.settings.label)
    return info


def parse_receptacle_info(document: Element) -> ReceptacleInfo:
    """Parse a receptacle (rpcReceptacle.htm) info page."""
    info = build_receptacle_info(get_info_tables(document))
    logger.debug("Parsed receptacle info: %s", info.settings.label)
    return info
