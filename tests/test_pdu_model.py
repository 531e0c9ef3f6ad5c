# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Tests for identifiers, vendor vocabularies and record serialization."""

import enum
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "bridge"))

from liebert_mpx.errors import StructureError, UnrecognizedValue
from liebert_mpx.pdu_model import (
    BRM_MODELS,
    CAPABILITIES,
    EVENT_TYPES,
    LINE_SOURCES,
    PAGE_RECEPTACLE_INFO,
    PEM_MODELS,
    RECEPTACLE_TYPES,
    SEVERITY_ICONS,
    WIRING_TYPES,
    BRMModel,
    Capability,
    Event,
    EventType,
    FirmwareVersion,
    LineSource,
    Location,
    PEMModel,
    ReceptacleType,
    Severity,
    WiringType,
    as_dict,
    decode_brm_model,
    decode_capability,
    decode_event_type,
    decode_line_source,
    decode_lock_state,
    decode_pem_model,
    decode_power_state,
    decode_receptacle_type,
    decode_severity,
    decode_wiring_type,
    parse_firmware_version,
    parse_location,
    parse_partial_location,
)


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

class TestLocation:
    def test_text_form(self):
        assert str(Location(1, 2, 3)) == "1-2-3"

    def test_defaults_to_zero(self):
        assert Location(4) == Location(4, 0, 0)

    def test_page_path(self):
        loc = Location(1, 2, 3)
        assert loc.page(PAGE_RECEPTACLE_INFO) == "/dp/std:1.2.3_0.0.0/rpc/rpcReceptacle.htm"

    def test_parse(self):
        assert parse_location("1-2-3") == Location(1, 2, 3)

    def test_parse_zero_components(self):
        assert parse_location("2-0-0") == Location(2, 0, 0)

    @pytest.mark.parametrize("text", ["1-2", "1", "1-2-3-4", ""])
    def test_parse_wrong_arity(self, text):
        with pytest.raises(StructureError):
            parse_location(text)

    @pytest.mark.parametrize("text", ["a-b-c", "1-x-3", "1--3", "1-2-256", "-1-2-3"])
    def test_parse_bad_components(self, text):
        with pytest.raises(StructureError):
            parse_location(text)

    def test_partial_pads_with_zero(self):
        assert parse_partial_location("1") == Location(1, 0, 0)
        assert parse_partial_location("1-2") == Location(1, 2, 0)
        assert parse_partial_location("1-2-3") == Location(1, 2, 3)

    def test_partial_too_many(self):
        with pytest.raises(StructureError):
            parse_partial_location("1-2-3-4")

    def test_partial_non_numeric(self):
        with pytest.raises(StructureError):
            parse_partial_location("PDU-1")


# ---------------------------------------------------------------------------
# Firmware version
# ---------------------------------------------------------------------------

class TestFirmwareVersion:
    def test_parse(self):
        assert parse_firmware_version("1-2-3-4") == FirmwareVersion(1, 2, 3, 4)

    def test_display_form(self):
        assert str(parse_firmware_version("1-3-0-12")) == "1.3.0.12"

    @pytest.mark.parametrize("raw", ["1-2-3", "1.2.3.4", "1-2-3-256", "1-2-3-x", "", "1-2-3-4-5"])
    def test_rejects(self, raw):
        with pytest.raises(UnrecognizedValue) as exc:
            parse_firmware_version(raw)
        assert exc.value.value == raw


# ---------------------------------------------------------------------------
# Vocabularies: every vendor string decodes, every member is reachable
# ---------------------------------------------------------------------------

VOCABULARIES = [
    (SEVERITY_ICONS, decode_severity, Severity),
    (WIRING_TYPES, decode_wiring_type, WiringType),
    (RECEPTACLE_TYPES, decode_receptacle_type, ReceptacleType),
    (PEM_MODELS, decode_pem_model, PEMModel),
    (BRM_MODELS, decode_brm_model, BRMModel),
    (EVENT_TYPES, decode_event_type, EventType),
    (LINE_SOURCES, decode_line_source, LineSource),
    (CAPABILITIES, decode_capability, Capability),
]


@pytest.mark.parametrize("vocabulary,decode,enum_type", VOCABULARIES)
def test_vocabulary_covers_enum(vocabulary, decode, enum_type):
    for raw, member in vocabulary.items():
        assert decode(raw) is member
    assert set(vocabulary.values()) == set(enum_type)


@pytest.mark.parametrize("vocabulary,decode,enum_type", VOCABULARIES)
def test_vocabulary_rejects_unknown(vocabulary, decode, enum_type):
    with pytest.raises(UnrecognizedValue):
        decode("something else")


def test_vocabulary_sizes():
    assert len(PEM_MODELS) == 8
    assert len(BRM_MODELS) == 27
    assert len(EVENT_TYPES) == 19


def test_decode_is_exact_match():
    with pytest.raises(UnrecognizedValue):
        decode_receptacle_type("c19")
    with pytest.raises(UnrecognizedValue):
        decode_severity("../../../images/accept.png ")


def test_unrecognized_value_carries_label():
    with pytest.raises(UnrecognizedValue) as exc:
        decode_line_source("Type L4-N", "Branch Line Source")
    assert exc.value.label == "Branch Line Source"
    assert "Branch Line Source" in str(exc.value)


def test_display_forms():
    assert str(WiringType.ONE_PHASE) == "1-Phase"
    assert str(ReceptacleType.C13) == "C13"
    assert str(LineSource.L3_N) == "L3-N"
    assert str(Capability.MEASURE_AND_CONTROL) == "Measure & Control"


class TestFlags:
    def test_power_state(self):
        assert decode_power_state("On") is True
        assert decode_power_state("Off") is False

    def test_lock_state(self):
        assert decode_lock_state("Locked") is True
        assert decode_lock_state("Unlocked") is False

    @pytest.mark.parametrize("raw", ["on", "ON", "Enabled", "1", ""])
    def test_power_state_strict(self, raw):
        with pytest.raises(UnrecognizedValue):
            decode_power_state(raw)

    @pytest.mark.parametrize("raw", ["locked", "Lock", "On"])
    def test_lock_state_strict(self, raw):
        with pytest.raises(UnrecognizedValue):
            decode_lock_state(raw)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def test_as_dict_event():
    event = Event(Severity.ALARM, Location(1, 2, 0), EventType.BRANCH_BREAKER_OPEN)
    assert as_dict(event) == {
        "level": "alarm",
        "location": "1-2-0",
        "event": "branch_breaker_open",
    }


def test_as_dict_list_is_json_ready():
    events = [
        Event(Severity.WARNING, Location(1), EventType.PDU_OVER_CURRENT_L1),
        Event(Severity.INFO, Location(1, 2, 3), EventType.RECEPTACLE_LOW_CURRENT),
    ]
    data = json.loads(json.dumps(as_dict(events)))
    assert [d["location"] for d in data] == ["1-0-0", "1-2-3"]


def test_as_dict_firmware_and_enum():
    assert as_dict(FirmwareVersion(1, 2, 3, 4)) == "1.2.3.4"
    assert as_dict(PEMModel.EHAXXR30) == "3 phase 32A monitored"
    assert isinstance(Severity.OK, enum.Enum)
