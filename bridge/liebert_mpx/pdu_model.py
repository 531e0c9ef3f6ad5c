# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""URL paths, vendor vocabularies and data models for Liebert MPX PDUs."""

import enum
import re
from dataclasses import dataclass, fields, is_dataclass

from .errors import StructureError, UnrecognizedValue

# Fixed pages
PATH_RECEPTACLE_LIST = "/rpc/rpcReceptacleListData.htm"
PATH_ACTIVE_ALARMS = "/rpc/rpcActiveAlarms.htm"

# Per-module pages live under /dp/std:<pdu>.<branch>.<receptacle>_0.0.0/rpc/
PAGE_PDU_INFO = "rpcAps.htm"
PAGE_BRANCH_INFO = "rpcRem.htm"
PAGE_RECEPTACLE_INFO = "rpcReceptacle.htm"

FORM_PDU_COMMAND = "rpcControlApsCommand"
FORM_BRANCH_COMMAND = "rpcControlRemCommand"
FORM_RECEPTACLE_COMMAND = "rpcControlReceptacleCommand"

FORM_PDU_SETTING = "rpcControlApsSetting"
FORM_BRANCH_SETTING = "rpcControlRemSetting"
FORM_RECEPTACLE_SETTING = "rpcControlReceptacleSetting"


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

_MAX_INDEX = 255
_DIGITS = re.compile(r"[0-9]+")


def _index(part: str, text: str) -> int:
    if not _DIGITS.fullmatch(part):
        raise StructureError(f"location {text!r}: {part!r} is not an index")
    value = int(part)
    if value > _MAX_INDEX:
        raise StructureError(f"location {text!r}: index {value} out of range")
    return value


@dataclass(frozen=True)
class Location:
    """(PDU, branch, receptacle) address. 0 means 'not at this level'."""
    pdu: int
    branch: int = 0
    receptacle: int = 0

    def __str__(self) -> str:
        return f"{self.pdu}-{self.branch}-{self.receptacle}"

    @property
    def path_segment(self) -> str:
        """Dotted form used inside device URLs, e.g. '1.2.3'."""
        return f"{self.pdu}.{self.branch}.{self.receptacle}"

    def page(self, name: str) -> str:
        return f"/dp/std:{self.path_segment}_0.0.0/rpc/{name}"


def parse_location(text: str) -> Location:
    """Parse a dash-joined triplet such as '1-2-3'. Exactly 3 parts."""
    parts = text.split("-")
    if len(parts) != 3:
        raise StructureError(
            f"location {text!r} has {len(parts)} components, expected 3"
        )
    return Location(*(_index(p, text) for p in parts))


def parse_partial_location(text: str) -> Location:
    """Parse '1', '1-2' or '1-2-3'; missing trailing parts become 0.

    Only the alarm list uses this form: PDU-level events carry just the
    PDU index.
    """
    parts = text.split("-")
    if len(parts) > 3:
        raise StructureError(
            f"location {text!r} has {len(parts)} components, expected at most 3"
        )
    parts += ["0"] * (3 - len(parts))
    return Location(*(_index(p, text) for p in parts))


@dataclass(frozen=True)
class FirmwareVersion:
    p0: int
    p1: int
    p2: int
    p3: int

    def __str__(self) -> str:
        return f"{self.p0}.{self.p1}.{self.p2}.{self.p3}"


def parse_firmware_version(raw: str) -> FirmwareVersion:
    """Parse the page form '1-2-3-4'; each part must fit in a byte."""
    parts = raw.split("-")
    if len(parts) != 4 or not all(_DIGITS.fullmatch(p) and int(p) <= 255 for p in parts):
        raise UnrecognizedValue("firmware version", raw)
    return FirmwareVersion(*(int(p) for p in parts))


# ---------------------------------------------------------------------------
# Closed vocabularies
# ---------------------------------------------------------------------------

class Severity(enum.Enum):
    OK = "ok"
    INFO = "info"
    WARNING = "warning"
    ALARM = "alarm"


SEVERITY_ICONS = {
    "../../../images/accept.png": Severity.OK,
    "../../../images/information.png": Severity.INFO,
    "../../../images/warn.png": Severity.WARNING,
    "../../../images/err.png": Severity.ALARM,
}


class WiringType(enum.Enum):
    ONE_PHASE = "1-Phase"       # L, N, PE
    THREE_PHASE = "3-Phase"     # L1, L2, L3, N, PE

    def __str__(self) -> str:
        return self.value


WIRING_TYPES = {
    "1-Phase / 3-Wire (L, N, PE)": WiringType.ONE_PHASE,
    "3-Phase / 5-Wire (L1, L2, L3, N, PE)": WiringType.THREE_PHASE,
}


class ReceptacleType(enum.Enum):
    C13 = "C13"
    C19 = "C19"
    SCHUKO = "Schuko"

    def __str__(self) -> str:
        return self.value


RECEPTACLE_TYPES = {
    "IEC 60320 Sheet F C13": ReceptacleType.C13,
    "C19": ReceptacleType.C19,
    "Schuko": ReceptacleType.SCHUKO,
}


class PEMModel(enum.Enum):
    """Power entry module catalog. Value is the catalog description."""
    EHAEXQ30 = "1 phase 32A elementary"
    EHAXXQ30 = "1 phase 32A monitored"
    EHAEXT30 = "3 phase 16A elementary"
    EHAXXT30 = "3 phase 16A monitored"
    EHAEXR30 = "3 phase 32A elementary"
    EHAXXR30 = "3 phase 32A monitored"
    EHBEXZ30 = "3 phase 63A elementary"
    EHBXXZ30 = "3 phase 63A monitored"


PEM_MODELS = {
    "MPXPEM-EHAEXQ30": PEMModel.EHAEXQ30,
    "MPXPEM-EHAXXQ30": PEMModel.EHAXXQ30,
    "MPXPEM-EHAEXT30": PEMModel.EHAEXT30,
    "MPXPEM-EHAXXT30": PEMModel.EHAXXT30,
    "MPXPEM-EHAEXR30": PEMModel.EHAEXR30,
    "MPXPEM-EHAXXR30": PEMModel.EHAXXR30,
    "MPXPEM-EHBEXZ30": PEMModel.EHBEXZ30,
    "MPXPEM-EHBXXZ30": PEMModel.EHBXXZ30,
}


class BRMModel(enum.Enum):
    """Branch receptacle module catalog. Value is the catalog description."""
    EEBC7N1N = "C13 L1 elementary"
    EEBC7N2N = "C13 L2 elementary"
    EEBC7N3N = "C13 L3 elementary"
    EEBC4O1N = "C19 L1 elementary"
    EEBC4O2N = "C19 L2 elementary"
    EEBC4O3N = "C19 L3 elementary"
    EEBC3P1N = "Schuko L1 elementary"
    EEBC3P2N = "Schuko L2 elementary"
    EEBC3P3N = "Schuko L3 elementary"
    EBBC6N1N = "C13 L1 branch-monitored"
    EBBC6N2N = "C13 L2 branch-monitored"
    EBBC6N3N = "C13 L3 branch-monitored"
    EBBC4O1N = "C19 L1 branch-monitored"
    EBBC4O2N = "C19 L2 branch-monitored"
    EBBC4O3N = "C19 L3 branch-monitored"
    EBBC3P1N = "Schuko L1 branch-monitored"
    EBBC3P2N = "Schuko L2 branch-monitored"
    EBBC3P3N = "Schuko L3 branch-monitored"
    ERBC6N1N = "C13 L1 receptacle-managed"
    ERBC6N2N = "C13 L2 receptacle-managed"
    ERBC6N3N = "C13 L3 receptacle-managed"
    ERBC4O1N = "C19 L1 receptacle-managed"
    ERBC4O2N = "C19 L2 receptacle-managed"
    ERBC4O3N = "C19 L3 receptacle-managed"
    ERBC3P1N = "Schuko L1 receptacle-managed"
    ERBC3P2N = "Schuko L2 receptacle-managed"
    ERBC3P3N = "Schuko L3 receptacle-managed"


BRM_MODELS = {
    "MPXBRM-EEBC7N1N": BRMModel.EEBC7N1N,
    "MPXBRM-EEBC7N2N": BRMModel.EEBC7N2N,
    "MPXBRM-EEBC7N3N": BRMModel.EEBC7N3N,
    "MPXBRM-EEBC4O1N": BRMModel.EEBC4O1N,
    "MPXBRM-EEBC4O2N": BRMModel.EEBC4O2N,
    "MPXBRM-EEBC4O3N": BRMModel.EEBC4O3N,
    "MPXBRM-EEBC3P1N": BRMModel.EEBC3P1N,
    "MPXBRM-EEBC3P2N": BRMModel.EEBC3P2N,
    "MPXBRM-EEBC3P3N": BRMModel.EEBC3P3N,
    "MPXBRM-EBBC6N1N": BRMModel.EBBC6N1N,
    "MPXBRM-EBBC6N2N": BRMModel.EBBC6N2N,
    "MPXBRM-EBBC6N3N": BRMModel.EBBC6N3N,
    "MPXBRM-EBBC4O1N": BRMModel.EBBC4O1N,
    "MPXBRM-EBBC4O2N": BRMModel.EBBC4O2N,
    "MPXBRM-EBBC4O3N": BRMModel.EBBC4O3N,
    "MPXBRM-EBBC3P1N": BRMModel.EBBC3P1N,
    "MPXBRM-EBBC3P2N": BRMModel.EBBC3P2N,
    "MPXBRM-EBBC3P3N": BRMModel.EBBC3P3N,
    "MPXBRM-ERBC6N1N": BRMModel.ERBC6N1N,
    "MPXBRM-ERBC6N2N": BRMModel.ERBC6N2N,
    "MPXBRM-ERBC6N3N": BRMModel.ERBC6N3N,
    "MPXBRM-ERBC4O1N": BRMModel.ERBC4O1N,
    "MPXBRM-ERBC4O2N": BRMModel.ERBC4O2N,
    "MPXBRM-ERBC4O3N": BRMModel.ERBC4O3N,
    "MPXBRM-ERBC3P1N": BRMModel.ERBC3P1N,
    "MPXBRM-ERBC3P2N": BRMModel.ERBC3P2N,
    "MPXBRM-ERBC3P3N": BRMModel.ERBC3P3N,
}


class EventType(enum.Enum):
    RECEPTACLE_OVER_CURRENT = "receptacle_over_current"
    RECEPTACLE_LOW_CURRENT = "receptacle_low_current"
    BRANCH_LOW_VOLTAGE = "branch_low_voltage"
    BRANCH_OVER_CURRENT = "branch_over_current"
    BRANCH_LOW_CURRENT = "branch_low_current"
    BRANCH_FAILURE = "branch_failure"
    BRANCH_BREAKER_OPEN = "branch_breaker_open"
    PDU_LOW_VOLTAGE_L1 = "pdu_low_voltage_l1"
    PDU_LOW_VOLTAGE_L2 = "pdu_low_voltage_l2"
    PDU_LOW_VOLTAGE_L3 = "pdu_low_voltage_l3"
    PDU_OVER_CURRENT_L1 = "pdu_over_current_l1"
    PDU_OVER_CURRENT_L2 = "pdu_over_current_l2"
    PDU_OVER_CURRENT_L3 = "pdu_over_current_l3"
    PDU_LOW_CURRENT_L1 = "pdu_low_current_l1"
    PDU_LOW_CURRENT_L2 = "pdu_low_current_l2"
    PDU_LOW_CURRENT_L3 = "pdu_low_current_l3"
    PDU_FAILURE = "pdu_failure"
    PDU_COMMUNICATION_FAIL = "pdu_communication_fail"
    PDU_OVER_CURRENT_N = "pdu_over_current_n"


EVENT_TYPES = {
    "Receptacle Over Current": EventType.RECEPTACLE_OVER_CURRENT,
    "Receptacle Low Current": EventType.RECEPTACLE_LOW_CURRENT,
    "Branch Low Voltage (LN)": EventType.BRANCH_LOW_VOLTAGE,
    "Branch Over Current": EventType.BRANCH_OVER_CURRENT,
    "Branch Low Current": EventType.BRANCH_LOW_CURRENT,
    "Branch Failure": EventType.BRANCH_FAILURE,
    "Branch Breaker Open": EventType.BRANCH_BREAKER_OPEN,
    "PDU Low Voltage L1-N": EventType.PDU_LOW_VOLTAGE_L1,
    "PDU Low Voltage L2-N": EventType.PDU_LOW_VOLTAGE_L2,
    "PDU Low Voltage L3-N": EventType.PDU_LOW_VOLTAGE_L3,
    "PDU Over Current L1": EventType.PDU_OVER_CURRENT_L1,
    "PDU Over Current L2": EventType.PDU_OVER_CURRENT_L2,
    "PDU Over Current L3": EventType.PDU_OVER_CURRENT_L3,
    "PDU Low Current L1": EventType.PDU_LOW_CURRENT_L1,
    "PDU Low Current L2": EventType.PDU_LOW_CURRENT_L2,
    "PDU Low Current L3": EventType.PDU_LOW_CURRENT_L3,
    "PDU Failure": EventType.PDU_FAILURE,
    "PDU Communication Fail": EventType.PDU_COMMUNICATION_FAIL,
    "PDU Neutral Over Current": EventType.PDU_OVER_CURRENT_N,
}


class LineSource(enum.Enum):
    L1_N = "L1-N"
    L2_N = "L2-N"
    L3_N = "L3-N"

    def __str__(self) -> str:
        return self.value


LINE_SOURCES = {
    "Type L1-N": LineSource.L1_N,
    "Type L2-N": LineSource.L2_N,
    "Type L3-N": LineSource.L3_N,
}


class Capability(enum.Enum):
    MEASURE_AND_CONTROL = "Measure & Control"

    def __str__(self) -> str:
        return self.value


CAPABILITIES = {
    "All Measurements/Control": Capability.MEASURE_AND_CONTROL,
}

# Two-word vocabularies for boolean states
POWER_STATES = {"On": True, "Off": False}
LOCK_STATES = {"Locked": True, "Unlocked": False}


def _decode(vocabulary: dict, what: str, raw: str, label: str | None = None):
    try:
        return vocabulary[raw]
    except KeyError:
        raise UnrecognizedValue(what, raw, label) from None


def decode_severity(raw: str, label: str | None = None) -> Severity:
    return _decode(SEVERITY_ICONS, "severity icon", raw, label)


def decode_wiring_type(raw: str, label: str | None = None) -> WiringType:
    return _decode(WIRING_TYPES, "wiring type", raw, label)


def decode_receptacle_type(raw: str, label: str | None = None) -> ReceptacleType:
    return _decode(RECEPTACLE_TYPES, "receptacle type", raw, label)


def decode_pem_model(raw: str, label: str | None = None) -> PEMModel:
    return _decode(PEM_MODELS, "PEM model", raw, label)


def decode_brm_model(raw: str, label: str | None = None) -> BRMModel:
    return _decode(BRM_MODELS, "BRM model", raw, label)


def decode_event_type(raw: str, label: str | None = None) -> EventType:
    return _decode(EVENT_TYPES, "event type", raw, label)


def decode_line_source(raw: str, label: str | None = None) -> LineSource:
    return _decode(LINE_SOURCES, "line source", raw, label)


def decode_capability(raw: str, label: str | None = None) -> Capability:
    return _decode(CAPABILITIES, "capability", raw, label)


def decode_power_state(raw: str, label: str | None = None) -> bool:
    return _decode(POWER_STATES, "power state", raw, label)


def decode_lock_state(raw: str, label: str | None = None) -> bool:
    return _decode(LOCK_STATES, "lock state", raw, label)


# ---------------------------------------------------------------------------
# Listing and alarm rows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Event:
    """One active alarm/warning from the alarm list."""
    level: Severity
    location: Location
    event: EventType


@dataclass(frozen=True)
class ReceptacleListEntry:
    """One row of the receptacle overview."""
    location: Location
    enabled: bool
    locked: bool
    status: Severity
    label: str


# ---------------------------------------------------------------------------
# PDU (power entry module) records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PDUStatus:
    accumulated_energy: float               # kWh
    input_power: float                      # W
    voltage_l1_n: float                     # V AC
    voltage_l2_n: float
    voltage_l3_n: float
    current_l1: float                       # A AC
    current_l2: float
    current_l3: float
    current_n: float
    current_available_to_alarm_l1: float    # A AC
    current_available_to_alarm_l2: float
    current_available_to_alarm_l3: float
    current_utilization_l1: float           # %
    current_utilization_l2: float
    current_utilization_l3: float
    line_frequency: float                   # Hz


@dataclass(frozen=True)
class PDUSettings:
    label: str
    asset_tag_1: str
    asset_tag_2: str
    # thresholds in %
    n_over_current_alarm_threshold: int
    n_over_current_warning_threshold: int
    l1_low_current_alarm_threshold: int
    l1_over_current_alarm_threshold: int
    l1_over_current_warning_threshold: int
    l2_low_current_alarm_threshold: int
    l2_over_current_alarm_threshold: int
    l2_over_current_warning_threshold: int
    l3_low_current_alarm_threshold: int
    l3_over_current_alarm_threshold: int
    l3_over_current_warning_threshold: int


@dataclass(frozen=True)
class PDUHardware:
    pem_model: PEMModel
    fw_version: FirmwareVersion
    serial_number: str
    wiring_type: WiringType
    rated_input_voltage: int                # V AC
    rated_input_current: int                # A AC
    rated_input_line_frequency: int         # Hz


@dataclass(frozen=True)
class PDUEvents:
    low_voltage_l1: Severity
    low_voltage_l2: Severity
    low_voltage_l3: Severity
    over_current_l1: Severity
    over_current_l2: Severity
    over_current_l3: Severity
    low_current_l1: Severity
    low_current_l2: Severity
    low_current_l3: Severity
    failure: Severity
    communication_fail: Severity
    over_current_n: Severity


@dataclass(frozen=True)
class PDUInfo:
    status: PDUStatus
    events: PDUEvents
    settings: PDUSettings
    hardware: PDUHardware


# ---------------------------------------------------------------------------
# Branch module records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BranchStatus:
    accumulated_energy: float               # kWh
    voltage: float                          # V AC
    current: float                          # A AC
    current_available_to_alarm: float       # A AC
    current_utilization: float              # %
    power: float                            # W
    apparent_power: float                   # VA
    power_factor: float                     # 0-1


@dataclass(frozen=True)
class BranchSettings:
    label: str
    asset_tag_1: str
    asset_tag_2: str
    over_current_alarm_threshold: int       # %
    over_current_warning_threshold: int     # %
    low_current_alarm_threshold: int        # %


@dataclass(frozen=True)
class BranchHardware:
    brm_model: BRMModel
    fw_version: FirmwareVersion
    serial_number: str
    receptacle_type: ReceptacleType
    capabilities: Capability
    line_source: LineSource
    rated_line_voltage: int                 # V AC
    rated_line_current: int                 # A AC
    rated_line_frequency: int               # Hz


@dataclass(frozen=True)
class BranchEvents:
    low_voltage: Severity
    over_current: Severity
    low_current: Severity
    failure: Severity
    breaker_open: Severity


@dataclass(frozen=True)
class BranchInfo:
    status: BranchStatus
    events: BranchEvents
    settings: BranchSettings
    hardware: BranchHardware


# ---------------------------------------------------------------------------
# Receptacle records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReceptacleStatus:
    accumulated_energy: float               # kWh
    voltage: float                          # V AC
    current: float                          # A AC
    current_available_to_alarm: float       # A AC
    current_utilization: float              # %
    power: float                            # W
    apparent_power: float                   # VA
    power_factor: float                     # 0-1
    current_crest_factor: float


@dataclass(frozen=True)
class ReceptacleSettings:
    label: str
    asset_tag_1: str
    asset_tag_2: str
    over_current_alarm_threshold: int       # %
    over_current_warning_threshold: int     # %
    low_current_alarm_threshold: int        # %
    power_state: bool                       # currently on
    power_control: bool                     # requested on
    control_lock_state: bool                # locked
    power_on_delay: int                     # seconds


@dataclass(frozen=True)
class ReceptacleHardware:
    receptacle_type: ReceptacleType
    line_source: LineSource
    capabilities: Capability


@dataclass(frozen=True)
class ReceptacleEvents:
    over_current: Severity
    low_current: Severity


@dataclass(frozen=True)
class ReceptacleInfo:
    status: ReceptacleStatus
    events: ReceptacleEvents
    settings: ReceptacleSettings
    hardware: ReceptacleHardware


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def as_dict(obj):
    """Render a record (or list of records) as JSON-ready primitives."""
    if isinstance(obj, (Location, FirmwareVersion)):
        return str(obj)
    if isinstance(obj, enum.Enum):
        return obj.value
    if is_dataclass(obj):
        return {f.name: as_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [as_dict(item) for item in obj]
    return obj
