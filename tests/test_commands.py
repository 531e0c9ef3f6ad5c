# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Tests for command and settings form encoding."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "bridge"))

from liebert_mpx.commands import (
    BranchCmd,
    PDUCmd,
    ReceptacleCmd,
    command_fields,
    command_path,
    settings_fields,
    settings_path,
)
from liebert_mpx.pdu_model import (
    BranchSettings,
    Location,
    PDUSettings,
    ReceptacleSettings,
)


def make_pdu_settings(**overrides):
    values = dict(
        label="Rack A1 PDU",
        asset_tag_1="INV-00412",
        asset_tag_2="",
        n_over_current_alarm_threshold=80,
        n_over_current_warning_threshold=70,
        l1_low_current_alarm_threshold=1,
        l1_over_current_alarm_threshold=81,
        l1_over_current_warning_threshold=71,
        l2_low_current_alarm_threshold=2,
        l2_over_current_alarm_threshold=82,
        l2_over_current_warning_threshold=72,
        l3_low_current_alarm_threshold=3,
        l3_over_current_alarm_threshold=83,
        l3_over_current_warning_threshold=73,
    )
    values.update(overrides)
    return PDUSettings(**values)


def make_receptacle_settings(**overrides):
    values = dict(
        label="db-02",
        asset_tag_1="",
        asset_tag_2="",
        over_current_alarm_threshold=80,
        over_current_warning_threshold=70,
        low_current_alarm_threshold=0,
        power_state=True,
        power_control=True,
        control_lock_state=False,
        power_on_delay=5,
    )
    values.update(overrides)
    return ReceptacleSettings(**values)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestCommandFields:
    @pytest.mark.parametrize("cmd,state", [
        (ReceptacleCmd.DISABLE, "0"),
        (ReceptacleCmd.ENABLE, "1"),
        (ReceptacleCmd.REBOOT, "2"),
    ])
    def test_receptacle_state(self, cmd, state):
        assert command_fields(cmd) == [("receptacleStateGroup", state), ("Submit", "Save")]

    def test_receptacle_identify(self):
        assert command_fields(ReceptacleCmd.IDENTIFY) == [("rcpIdentControl", "Submit")]

    @pytest.mark.parametrize("cmd", [
        ReceptacleCmd.RESET_ENERGY, BranchCmd.RESET_ENERGY, PDUCmd.RESET_ENERGY,
    ])
    def test_reset_energy(self, cmd):
        assert command_fields(cmd) == [("energyControl", "Reset")]

    def test_pdu_test_event(self):
        assert command_fields(PDUCmd.TEST_EVENT) == [("testEvent", "Send")]

    def test_fields_are_a_copy(self):
        fields = command_fields(PDUCmd.RESET_ENERGY)
        fields.append(("x", "y"))
        assert command_fields(BranchCmd.RESET_ENERGY) == [("energyControl", "Reset")]


class TestCommandPath:
    def test_pdu(self):
        assert command_path(PDUCmd.TEST_EVENT, Location(1)) == \
            "/dp/std:1.0.0_0.0.0/rpc/rpcControlApsCommand"

    def test_branch(self):
        assert command_path(BranchCmd.RESET_ENERGY, Location(1, 4)) == \
            "/dp/std:1.4.0_0.0.0/rpc/rpcControlRemCommand"

    def test_receptacle(self):
        assert command_path(ReceptacleCmd.REBOOT, Location(2, 1, 12)) == \
            "/dp/std:2.1.12_0.0.0/rpc/rpcControlReceptacleCommand"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettingsFields:
    def test_pdu_order(self):
        fields = settings_fields(make_pdu_settings())
        assert fields == [
            ("Submit", "Save"),
            ("label", "Rack A1 PDU"),
            ("assetTag1", "INV-00412"),
            ("assetTag2", ""),
            ("ecNeutralThrshldOverAlarm", "80"),
            ("ecNeutralThrshldOverWarn", "70"),
            ("ecThresholdHiAlmL1", "81"),
            ("ecThresholdHiAlmL2", "82"),
            ("ecThresholdHiAlmL3", "83"),
            ("ecThresholdHiWrnL1", "71"),
            ("ecThresholdHiWrnL2", "72"),
            ("ecThresholdHiWrnL3", "73"),
            ("ecThresholdLoAlmL1", "1"),
            ("ecThresholdLoAlmL2", "2"),
            ("ecThresholdLoAlmL3", "3"),
        ]

    def test_branch(self):
        settings = BranchSettings(
            label="Storage shelf", asset_tag_1="", asset_tag_2="BR-7",
            over_current_alarm_threshold=80,
            over_current_warning_threshold=70,
            low_current_alarm_threshold=0,
        )
        assert settings_fields(settings) == [
            ("Submit", "Save"),
            ("label", "Storage shelf"),
            ("assetTag1", ""),
            ("assetTag2", "BR-7"),
            ("ecThresholdHiAlmLN", "80"),
            ("ecThresholdHiWrnLN", "70"),
            ("ecThresholdLoAlmLN", "0"),
        ]

    def test_receptacle(self):
        assert settings_fields(make_receptacle_settings()) == [
            ("Submit", "Save"),
            ("label", "db-02"),
            ("assetTag1", ""),
            ("assetTag2", ""),
            ("ecThresholdHiAlmL1", "80"),
            ("ecThresholdHiWrnL1", "70"),
            ("ecThresholdLoAlmL1", "0"),
            ("powerUpDelay", "5"),
            ("lockStateTypeGroup1", "0"),
        ]

    def test_receptacle_locked(self):
        fields = dict(settings_fields(make_receptacle_settings(control_lock_state=True)))
        assert fields["lockStateTypeGroup1"] == "1"

    def test_no_value_validation(self):
        fields = dict(settings_fields(make_pdu_settings(n_over_current_alarm_threshold=999)))
        assert fields["ecNeutralThrshldOverAlarm"] == "999"

    def test_not_settings(self):
        with pytest.raises(TypeError):
            settings_fields(object())

    def test_paths(self):
        assert settings_path(make_pdu_settings(), Location(1)) == \
            "/dp/std:1.0.0_0.0.0/rpc/rpcControlApsSetting"
        assert settings_path(make_receptacle_settings(), Location(1, 2, 3)) == \
            "/dp/std:1.2.3_0.0.0/rpc/rpcControlReceptacleSetting"
