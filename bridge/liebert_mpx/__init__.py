# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Typed access to the Liebert MPX rack PDU web interface."""

__version__ = "1.0.0"
