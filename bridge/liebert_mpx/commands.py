# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Command and settings form encoding for the MPX web interface.

The device accepts form posts on per-module endpoints. Commands and
settings are rendered as ordered (field, value) pairs; the web client
posts them unchanged.
"""

import enum

from .pdu_model import (
    FORM_BRANCH_COMMAND,
    FORM_BRANCH_SETTING,
    FORM_PDU_COMMAND,
    FORM_PDU_SETTING,
    FORM_RECEPTACLE_COMMAND,
    FORM_RECEPTACLE_SETTING,
    BranchSettings,
    Location,
    PDUSettings,
    ReceptacleSettings,
)

FormFields = list[tuple[str, str]]


class PDUCmd(enum.Enum):
    TEST_EVENT = "test-event"
    RESET_ENERGY = "reset-energy"


class BranchCmd(enum.Enum):
    RESET_ENERGY = "reset-energy"


class ReceptacleCmd(enum.Enum):
    DISABLE = "disable"
    ENABLE = "enable"
    REBOOT = "reboot"
    IDENTIFY = "identify"
    RESET_ENERGY = "reset-energy"


_RESET_ENERGY = [("energyControl", "Reset")]

PDU_CMD_MAP = {
    PDUCmd.TEST_EVENT: [("testEvent", "Send")],
    PDUCmd.RESET_ENERGY: _RESET_ENERGY,
}

BRANCH_CMD_MAP = {
    BranchCmd.RESET_ENERGY: _RESET_ENERGY,
}

RECEPTACLE_CMD_MAP = {
    ReceptacleCmd.DISABLE: [("receptacleStateGroup", "0"), ("Submit", "Save")],
    ReceptacleCmd.ENABLE: [("receptacleStateGroup", "1"), ("Submit", "Save")],
    ReceptacleCmd.REBOOT: [("receptacleStateGroup", "2"), ("Submit", "Save")],
    ReceptacleCmd.IDENTIFY: [("rcpIdentControl", "Submit")],
    ReceptacleCmd.RESET_ENERGY: _RESET_ENERGY,
}

_COMMAND_FORMS = {
    PDUCmd: (PDU_CMD_MAP, FORM_PDU_COMMAND),
    BranchCmd: (BRANCH_CMD_MAP, FORM_BRANCH_COMMAND),
    ReceptacleCmd: (RECEPTACLE_CMD_MAP, FORM_RECEPTACLE_COMMAND),
}

_SETTING_FORMS = {
    PDUSettings: FORM_PDU_SETTING,
    BranchSettings: FORM_BRANCH_SETTING,
    ReceptacleSettings: FORM_RECEPTACLE_SETTING,
}


def command_fields(cmd: PDUCmd | BranchCmd | ReceptacleCmd) -> FormFields:
    """Form fields that trigger *cmd*."""
    cmd_map, _ = _COMMAND_FORMS[type(cmd)]
    return list(cmd_map[cmd])


def command_path(cmd: PDUCmd | BranchCmd | ReceptacleCmd,
                 location: Location) -> str:
    """URL path the command form for *cmd* is posted to."""
    _, form = _COMMAND_FORMS[type(cmd)]
    return location.page(form)


def settings_path(settings: PDUSettings | BranchSettings | ReceptacleSettings,
                  location: Location) -> str:
    return location.page(_SETTING_FORMS[type(settings)])


def settings_fields(
    settings: PDUSettings | BranchSettings | ReceptacleSettings,
) -> FormFields:
    """Render a settings record as the device's settings form.

    Values are sent as-is; range checking is left to the device.
    """
    if not isinstance(settings, tuple(_SETTING_FORMS)):
        raise TypeError(f"not a settings record: {type(settings).__name__}")

    fields = [
        ("Submit", "Save"),
        ("label", settings.label),
        ("assetTag1", settings.asset_tag_1),
        ("assetTag2", settings.asset_tag_2),
    ]

    if isinstance(settings, PDUSettings):
        fields += [
            ("ecNeutralThrshldOverAlarm", str(settings.n_over_current_alarm_threshold)),
            ("ecNeutralThrshldOverWarn", str(settings.n_over_current_warning_threshold)),
            ("ecThresholdHiAlmL1", str(settings.l1_over_current_alarm_threshold)),
            ("ecThresholdHiAlmL2", str(settings.l2_over_current_alarm_threshold)),
            ("ecThresholdHiAlmL3", str(settings.l3_over_current_alarm_threshold)),
            ("ecThresholdHiWrnL1", str(settings.l1_over_current_warning_threshold)),
            ("ecThresholdHiWrnL2", str(settings.l2_over_current_warning_threshold)),
            ("ecThresholdHiWrnL3", str(settings.l3_over_current_warning_threshold)),
            ("ecThresholdLoAlmL1", str(settings.l1_low_current_alarm_threshold)),
            ("ecThresholdLoAlmL2", str(settings.l2_low_current_alarm_threshold)),
            ("ecThresholdLoAlmL3", str(settings.l3_low_current_alarm_threshold)),
        ]
    elif isinstance(settings, BranchSettings):
        fields += [
            ("ecThresholdHiAlmLN", str(settings.over_current_alarm_threshold)),
            ("ecThresholdHiWrnLN", str(settings.over_current_warning_threshold)),
            ("ecThresholdLoAlmLN", str(settings.low_current_alarm_threshold)),
        ]
    else:
        fields += [
            ("ecThresholdHiAlmL1", str(settings.over_current_alarm_threshold)),
            ("ecThresholdHiWrnL1", str(settings.over_current_warning_threshold)),
            ("ecThresholdLoAlmL1", str(settings.low_current_alarm_threshold)),
            ("powerUpDelay", str(settings.power_on_delay)),
            ("lockStateTypeGroup1", "1" if settings.control_lock_state else "0"),
        ]

    return fields
